from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AdminCountryIn(BaseModel):
    id: int
    short_name: Optional[str] = None
    name: str
    logo: Optional[str] = None


class AdminPlayerIn(BaseModel):
    id: int
    full_name: str
    name_display: Optional[str] = None
    role: Optional[str] = None
    tier: Optional[str] = None
    country: Optional[AdminCountryIn] = None
    image: Optional[str] = None


class AdminPlayersUpsertIn(BaseModel):
    players: List[AdminPlayerIn]


class AdminCardIn(BaseModel):
    user_id: int
    player_id: int
    card_type: Optional[str] = None
    edition: Optional[str] = None
    minted_on: Optional[date] = None


class AdminCardOut(BaseModel):
    id: int
    user_id: int
    player_id: int
    card_type: Optional[str] = None
    edition: Optional[str] = None
    minted_on: Optional[date] = None


class AdminLeagueCardGrantIn(BaseModel):
    user_id: int
    player_id: int


class AdminLeagueCardOut(BaseModel):
    league_card_id: int
    league_id: int
    user_id: int
    player_id: int
    source_kind: str


class AdminMatchIn(BaseModel):
    id: int
    match_date: date
    format: str
    competition_id: Optional[int] = None
    competition: Optional[str] = None
    match_name: str
    venue: Optional[str] = None


class AdminMatchesUpsertIn(BaseModel):
    matches: List[AdminMatchIn]


class AdminScoreRowIn(BaseModel):
    user_id: int
    total_points: float = 0.0
    rank: int = Field(ge=1)


class AdminLeaderboardIn(BaseModel):
    rows: List[AdminScoreRowIn]


class AdminActionLogOut(BaseModel):
    id: int
    category: str
    action: str
    created_at: datetime
    actor_user_id: Optional[int] = None
    actor_email: Optional[str] = None
    league_id: Optional[int] = None
    target_user_id: Optional[int] = None
    details: Optional[str] = None
