from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel


class TeamOut(BaseModel):
    submission_id: int
    league_id: int
    user_id: int
    captain_league_card_id: Optional[int] = None
    vice_captain_league_card_id: Optional[int] = None
    league_card_ids: List[int]
    created_at: datetime
    updated_at: Optional[datetime] = None


class LeagueCardOut(BaseModel):
    league_card_id: int
    league_id: int
    user_id: int
    player_id: int
    source_kind: str
    backing_card_id: Optional[int] = None
    league_card_created_at: datetime

    player_full_name: str
    player_name_display: str
    role: Optional[str] = None
    tier: Optional[str] = None
    country_id: Optional[int] = None
    player_image: Optional[str] = None

    country_short_name: Optional[str] = None
    country_name: Optional[str] = None
    country_logo: Optional[str] = None

    card_type: Optional[str] = None
    edition: Optional[str] = None
    minted_on: Optional[date] = None

    is_selected: bool
    selected_at: Optional[datetime] = None


class SelectionUpdateIn(BaseModel):
    league_card_ids: List[int]


class CaptainsUpdateIn(BaseModel):
    captain_league_card_id: Optional[int] = None
    vice_captain_league_card_id: Optional[int] = None
