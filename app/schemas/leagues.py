from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class LeagueCreateIn(BaseModel):
    name: str = Field(max_length=80)
    description: Optional[str] = None
    max_users: Optional[int] = None
    start_date: date
    end_date: date
    allowed_formats: List[str] = Field(default_factory=list)
    competition_ids: List[int] = Field(default_factory=list)
    team_size: Optional[int] = None
    update_policy: str = "LOCK_PER_GAMEWEEK"
    visibility: str = "PRIVATE"


class LeagueCreatedOut(BaseModel):
    league_id: int
    join_code: Optional[str] = None


class LeagueJoinIn(BaseModel):
    code: str


class LeagueSummaryOut(BaseModel):
    league_id: int
    name: str
    description: Optional[str] = None
    visibility: str
    owner_user_id: int
    owner_display_name: Optional[str] = None
    max_users: int
    start_ts: datetime
    end_ts: datetime
    allowed_formats: List[str]
    update_policy: str
    created_at: datetime
    active_members_count: int


class MyLeagueOut(LeagueSummaryOut):
    joined_at: datetime
    my_status: str
    is_owner: bool


class LeagueDetailOut(LeagueSummaryOut):
    rules: Dict[str, Any]
    team_size: int
    join_code: Optional[str] = None
    is_member: bool
    is_owner: bool


class MembershipOut(BaseModel):
    league_id: int
    user_id: int
    status: str
    joined_at: datetime


class MemberOut(BaseModel):
    user_id: Optional[int] = None
    display_name: Optional[str] = None
    avatar_path: Optional[str] = None
    joined_at: datetime
    status: Optional[str] = None
    is_owner: bool = False


class KickIn(BaseModel):
    note: Optional[str] = None


class LeagueDeleteIn(BaseModel):
    note: str = ""


class LeagueMatchOut(BaseModel):
    match_id: int
    match_date: date
    format: str
    competition_id: Optional[int] = None
    competition: Optional[str] = None
    match_name: str
    venue: Optional[str] = None


class LeaderboardEntryOut(BaseModel):
    user_id: int
    display_name: str
    avatar_path: Optional[str] = None
    total_points: float
    rank: int
