from pydantic import BaseModel


class CompetitionOut(BaseModel):
    competition_id: int
    competition: str
