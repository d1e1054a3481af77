from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.config import get_settings
from app.db.session import get_db
from app.models import LeagueMember, User
from app.schemas.leagues import (
    KickIn,
    LeagueCreatedOut,
    LeagueCreateIn,
    LeagueDeleteIn,
    LeagueDetailOut,
    LeagueJoinIn,
    LeagueMatchOut,
    LeagueSummaryOut,
    MemberOut,
    MembershipOut,
    MyLeagueOut,
)
from app.services import leagues as registry
from app.services import membership as members
from app.services.errors import RateLimitError
from app.services.rate_limit import join_limiter

router = APIRouter(prefix="/leagues", tags=["leagues"])


def _membership_out(membership: LeagueMember) -> MembershipOut:
    return MembershipOut(
        league_id=membership.league_id,
        user_id=membership.user_id,
        status=membership.status,
        joined_at=membership.joined_at,
    )


@router.post("", response_model=LeagueCreatedOut)
def create_league(
    payload: LeagueCreateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> LeagueCreatedOut:
    league = registry.create_league(
        db,
        user,
        name=payload.name,
        description=payload.description,
        max_users=payload.max_users,
        start_date=payload.start_date,
        end_date=payload.end_date,
        allowed_formats=payload.allowed_formats,
        competition_ids=payload.competition_ids,
        team_size=payload.team_size,
        update_policy=payload.update_policy,
        visibility=payload.visibility,
    )
    return LeagueCreatedOut(league_id=league.id, join_code=league.join_code)


@router.get("/public", response_model=List[LeagueSummaryOut])
def discover_public_leagues(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> List[LeagueSummaryOut]:
    return registry.discover_public_leagues(db)


@router.get("/mine", response_model=List[MyLeagueOut])
def list_my_leagues(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> List[MyLeagueOut]:
    return registry.list_my_leagues(db, user)


@router.post("/join", response_model=MembershipOut)
def join_by_code(
    payload: LeagueJoinIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MembershipOut:
    settings = get_settings()
    if not join_limiter.allow(
        f"join:{user.id}", settings.JOIN_RATE_LIMIT_MAX, settings.JOIN_RATE_LIMIT_WINDOW
    ):
        raise RateLimitError()
    return _membership_out(registry.join_by_code(db, user, payload.code))


@router.get("/{league_id}", response_model=LeagueDetailOut)
def get_league(
    league_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> LeagueDetailOut:
    return registry.get_league_detail(db, user, league_id)


@router.get("/{league_id}/matches", response_model=List[LeagueMatchOut])
def list_league_matches(
    league_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> List[LeagueMatchOut]:
    return registry.list_league_matches(db, user, league_id)


@router.post("/{league_id}/join", response_model=MembershipOut)
def join_public(
    league_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MembershipOut:
    return _membership_out(registry.join_public(db, user, league_id))


@router.post("/{league_id}/leave", response_model=MembershipOut)
def leave_league(
    league_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MembershipOut:
    return _membership_out(registry.leave_league(db, user, league_id))


@router.get("/{league_id}/members", response_model=List[MemberOut])
def list_members(
    league_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> List[MemberOut]:
    return members.list_members(db, league_id, user)


@router.post("/{league_id}/members/{member_user_id}/kick", response_model=MembershipOut)
def kick_member(
    league_id: int,
    member_user_id: int,
    payload: KickIn | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MembershipOut:
    note = payload.note if payload else None
    return _membership_out(members.kick_member(db, league_id, user, member_user_id, note))


@router.post("/{league_id}/delete")
def delete_league(
    league_id: int,
    payload: LeagueDeleteIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> dict:
    members.delete_league(db, league_id, user, payload.note)
    return {"ok": True, "league_id": league_id}
