from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from app.models import (
    ActionLog,
    League,
    LeagueCard,
    LeagueMember,
    LeagueScore,
    LeagueTeam,
    LeagueTeamCard,
    User,
)
from app.schemas.leagues import MemberOut
from app.services.action_log import log_action
from app.services.errors import AuthError, NotFoundError, ValidationError
from app.services.leagues import (
    MEMBER_ACTIVE,
    MEMBER_REMOVED,
    get_league,
    get_membership,
    is_active,
)
from app.services.validation import normalize_note

logger = logging.getLogger(__name__)


def _require_owner(league: League, caller: User) -> None:
    if league.owner_user_id != caller.id:
        raise AuthError("not_league_owner")


def list_members(db: Session, league_id: int, caller: User) -> List[MemberOut]:
    """Active members ordered by join time.

    Members see the full rows. Outsiders of a public league get the public
    projection without user ids or statuses; outsiders of a private league
    are refused.
    """
    league = get_league(db, league_id)
    caller_membership = get_membership(db, league.id, caller.id)
    full_view = is_active(caller_membership)
    if not full_view and league.visibility != "PUBLIC":
        raise AuthError("not_league_member")

    rows = db.execute(
        select(LeagueMember, User)
        .join(User, User.id == LeagueMember.user_id)
        .where(LeagueMember.league_id == league.id, LeagueMember.status == MEMBER_ACTIVE)
        .order_by(LeagueMember.joined_at, LeagueMember.user_id)
    ).all()
    return [
        MemberOut(
            user_id=user.id if full_view else None,
            display_name=user.display_name,
            avatar_path=user.avatar_path,
            joined_at=membership.joined_at,
            status=membership.status if full_view else None,
            is_owner=user.id == league.owner_user_id,
        )
        for membership, user in rows
    ]


def kick_member(
    db: Session,
    league_id: int,
    caller: User,
    target_user_id: int,
    note: Optional[str] = None,
) -> LeagueMember:
    league = get_league(db, league_id)
    _require_owner(league, caller)
    if target_user_id == league.owner_user_id:
        raise ValidationError("cannot_kick_owner")

    membership = get_membership(db, league.id, target_user_id)
    if not is_active(membership):
        raise NotFoundError("member_not_found")

    cleaned = normalize_note(note)
    membership.status = MEMBER_REMOVED
    membership.removed_at = datetime.now(timezone.utc)
    membership.removed_note = cleaned
    log_action(
        db,
        category="league",
        action="kick_member",
        actor_user_id=caller.id,
        league_id=league.id,
        target_user_id=target_user_id,
        details={"note": cleaned} if cleaned else None,
        commit=False,
    )
    db.commit()
    logger.info(
        "league:kick league_id=%s owner=%s target=%s", league.id, caller.id, target_user_id
    )
    return membership


def delete_league(db: Session, league_id: int, caller: User, note: Optional[str]) -> None:
    cleaned = normalize_note(note)
    if not cleaned:
        raise ValidationError("delete_note_required")

    league = get_league(db, league_id)
    _require_owner(league, caller)
    league_name = league.name

    team_ids = select(LeagueTeam.id).where(LeagueTeam.league_id == league.id)
    db.execute(delete(LeagueTeamCard).where(LeagueTeamCard.submission_id.in_(team_ids)))
    db.execute(delete(LeagueTeam).where(LeagueTeam.league_id == league.id))
    db.execute(delete(LeagueCard).where(LeagueCard.league_id == league.id))
    db.execute(delete(LeagueScore).where(LeagueScore.league_id == league.id))
    db.execute(delete(LeagueMember).where(LeagueMember.league_id == league.id))
    db.execute(
        update(ActionLog).where(ActionLog.league_id == league.id).values(league_id=None)
    )
    db.execute(delete(League).where(League.id == league.id))
    log_action(
        db,
        category="league",
        action="delete",
        actor_user_id=caller.id,
        details={"league_id": league_id, "name": league_name, "note": cleaned},
        commit=False,
    )
    db.commit()
    logger.info("league:delete league_id=%s owner=%s", league_id, caller.id)
