from __future__ import annotations

import logging
import secrets
import string
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models import League, LeagueMember, Match, User
from app.schemas.leagues import (
    LeagueDetailOut,
    LeagueMatchOut,
    LeagueSummaryOut,
    MyLeagueOut,
)
from app.services.action_log import log_action
from app.services.errors import AuthError, CapacityError, ConflictError, NotFoundError, ValidationError
from app.services.validation import validate_league_settings

logger = logging.getLogger(__name__)

settings = get_settings()

MEMBER_ACTIVE = "ACTIVE"
MEMBER_REMOVED = "REMOVED"
MEMBER_LEFT = "LEFT"

CODE_ATTEMPTS = 5


def _generate_code(length: int) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _code_taken(db: Session, code: str) -> bool:
    return db.execute(select(League.id).where(League.join_code == code)).scalar_one_or_none() is not None


def _window_bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
    start_ts = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
    end_ts = datetime.combine(end_date, time(23, 59, 59), tzinfo=timezone.utc)
    return start_ts, end_ts


def _normalize_formats(formats: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for raw in formats:
        value = (raw or "").strip().upper()
        if value and value not in seen:
            seen.append(value)
    return seen


def _build_rules(competition_ids: Iterable[int], team_size: Optional[int]) -> Dict[str, Any]:
    rules: Dict[str, Any] = {}
    ids = sorted(set(competition_ids))
    if ids:
        rules["competition_ids"] = ids
    if team_size is not None:
        rules["team_size"] = team_size
    return rules


def league_competition_ids(league: League) -> List[int]:
    rules = league.rules or {}
    raw = rules.get("competition_ids") or []
    return [int(value) for value in raw]


def league_team_size(league: League) -> int:
    rules = league.rules or {}
    size = rules.get("team_size")
    if isinstance(size, int) and size > 0:
        return size
    return settings.DEFAULT_TEAM_SIZE


def is_active(membership: Optional[LeagueMember]) -> bool:
    return membership is not None and membership.status == MEMBER_ACTIVE


def can_view_join_code(league: League, membership: Optional[LeagueMember]) -> bool:
    return league.visibility == "PRIVATE" and bool(league.join_code) and is_active(membership)


def get_league(db: Session, league_id: int) -> League:
    league = db.get(League, league_id)
    if not league:
        raise NotFoundError("league_not_found")
    return league


def get_membership(db: Session, league_id: int, user_id: int) -> Optional[LeagueMember]:
    return db.get(LeagueMember, (league_id, user_id))


def active_member_count(db: Session, league_id: int) -> int:
    return (
        db.execute(
            select(func.count())
            .select_from(LeagueMember)
            .where(LeagueMember.league_id == league_id, LeagueMember.status == MEMBER_ACTIVE)
        ).scalar()
        or 0
    )


def require_league_access(
    db: Session, league_id: int, user: User
) -> Tuple[League, Optional[LeagueMember]]:
    league = get_league(db, league_id)
    membership = get_membership(db, league.id, user.id)
    if league.visibility != "PUBLIC" and not is_active(membership):
        raise AuthError("not_league_member")
    return league, membership


def require_active_member(db: Session, league_id: int, user: User) -> Tuple[League, LeagueMember]:
    league = get_league(db, league_id)
    membership = get_membership(db, league.id, user.id)
    if not is_active(membership):
        raise AuthError("not_league_member")
    return league, membership


def _member_counts(db: Session, league_ids: List[int]) -> Dict[int, int]:
    if not league_ids:
        return {}
    rows = db.execute(
        select(LeagueMember.league_id, func.count())
        .where(LeagueMember.league_id.in_(league_ids), LeagueMember.status == MEMBER_ACTIVE)
        .group_by(LeagueMember.league_id)
    ).all()
    return {league_id: count for league_id, count in rows}


def _display_names(db: Session, user_ids: Iterable[int]) -> Dict[int, Optional[str]]:
    ids = list(set(user_ids))
    if not ids:
        return {}
    rows = db.execute(select(User.id, User.display_name).where(User.id.in_(ids))).all()
    return {user_id: name for user_id, name in rows}


def _summary_fields(
    league: League,
    counts: Dict[int, int],
    owners: Dict[int, Optional[str]],
) -> Dict[str, Any]:
    return {
        "league_id": league.id,
        "name": league.name,
        "description": league.description,
        "visibility": league.visibility,
        "owner_user_id": league.owner_user_id,
        "owner_display_name": owners.get(league.owner_user_id),
        "max_users": league.max_users,
        "start_ts": league.start_ts,
        "end_ts": league.end_ts,
        "allowed_formats": list(league.allowed_formats or []),
        "update_policy": league.update_policy,
        "created_at": league.created_at,
        "active_members_count": counts.get(league.id, 0),
    }


def create_league(
    db: Session,
    user: User,
    *,
    name: str,
    start_date: date,
    end_date: date,
    description: Optional[str] = None,
    max_users: Optional[int] = None,
    allowed_formats: Iterable[str] = (),
    competition_ids: Iterable[int] = (),
    team_size: Optional[int] = None,
    update_policy: str = "LOCK_PER_GAMEWEEK",
    visibility: str = "PRIVATE",
) -> League:
    if max_users is None:
        max_users = settings.DEFAULT_MAX_USERS
    visibility = (visibility or "").strip().upper()
    update_policy = (update_policy or "").strip().upper()

    errors = validate_league_settings(
        name, max_users, start_date, end_date, update_policy, visibility, team_size
    )
    if errors:
        raise ValidationError(errors)

    start_ts, end_ts = _window_bounds(start_date, end_date)
    league = None
    for attempt in range(1, CODE_ATTEMPTS + 1):
        join_code = None
        if visibility == "PRIVATE":
            join_code = _generate_code(settings.JOIN_CODE_LENGTH)
            if _code_taken(db, join_code):
                continue
        league = League(
            name=name.strip(),
            description=(description or "").strip() or None,
            visibility=visibility,
            owner_user_id=user.id,
            max_users=max_users,
            start_ts=start_ts,
            end_ts=end_ts,
            allowed_formats=_normalize_formats(allowed_formats),
            rules=_build_rules(competition_ids, team_size),
            update_policy=update_policy,
            join_code=join_code,
        )
        db.add(league)
        try:
            db.flush()
            break
        except IntegrityError:
            # Another request took the code between the lookup and the insert.
            db.rollback()
            league = None
            if join_code is None:
                raise
            logger.info("league:code_collision attempt=%s", attempt)
    if league is None:
        raise ConflictError("code_generation_failed")

    db.add(
        LeagueMember(
            league_id=league.id,
            user_id=user.id,
            status=MEMBER_ACTIVE,
            joined_at=datetime.now(timezone.utc),
        )
    )
    log_action(
        db,
        category="league",
        action="create",
        actor_user_id=user.id,
        league_id=league.id,
        details={"name": league.name, "visibility": visibility, "max_users": max_users},
        commit=False,
    )
    db.commit()
    db.refresh(league)
    logger.info("league:create league_id=%s owner=%s visibility=%s", league.id, user.id, visibility)
    return league


def discover_public_leagues(db: Session) -> List[LeagueSummaryOut]:
    leagues = (
        db.execute(
            select(League)
            .where(League.visibility == "PUBLIC")
            .order_by(League.created_at.desc(), League.id.desc())
        )
        .scalars()
        .all()
    )
    counts = _member_counts(db, [league.id for league in leagues])
    owners = _display_names(db, [league.owner_user_id for league in leagues])
    return [LeagueSummaryOut(**_summary_fields(league, counts, owners)) for league in leagues]


def list_my_leagues(db: Session, user: User) -> List[MyLeagueOut]:
    rows = db.execute(
        select(League, LeagueMember)
        .join(LeagueMember, LeagueMember.league_id == League.id)
        .where(LeagueMember.user_id == user.id, LeagueMember.status == MEMBER_ACTIVE)
        .order_by(LeagueMember.joined_at.desc(), League.id.desc())
    ).all()
    leagues = [league for league, _ in rows]
    counts = _member_counts(db, [league.id for league in leagues])
    owners = _display_names(db, [league.owner_user_id for league in leagues])
    return [
        MyLeagueOut(
            **_summary_fields(league, counts, owners),
            joined_at=membership.joined_at,
            my_status=membership.status,
            is_owner=league.owner_user_id == user.id,
        )
        for league, membership in rows
    ]


def get_league_detail(db: Session, user: User, league_id: int) -> LeagueDetailOut:
    league, membership = require_league_access(db, league_id, user)
    counts = _member_counts(db, [league.id])
    owners = _display_names(db, [league.owner_user_id])
    return LeagueDetailOut(
        **_summary_fields(league, counts, owners),
        rules=dict(league.rules or {}),
        team_size=league_team_size(league),
        join_code=league.join_code if can_view_join_code(league, membership) else None,
        is_member=is_active(membership),
        is_owner=league.owner_user_id == user.id,
    )


def list_league_matches(db: Session, user: User, league_id: int) -> List[LeagueMatchOut]:
    league, _ = require_league_access(db, league_id, user)
    query = select(Match).where(
        Match.match_date >= league.start_ts.date(),
        Match.match_date <= league.end_ts.date(),
    )
    formats = list(league.allowed_formats or [])
    if formats:
        query = query.where(Match.format.in_(formats))
    competition_ids = league_competition_ids(league)
    if competition_ids:
        query = query.where(Match.competition_id.in_(competition_ids))
    matches = db.execute(query.order_by(Match.match_date, Match.id)).scalars().all()
    return [
        LeagueMatchOut(
            match_id=match.id,
            match_date=match.match_date,
            format=match.format,
            competition_id=match.competition_id,
            competition=match.competition,
            match_name=match.match_name,
            venue=match.venue,
        )
        for match in matches
    ]


def _admit_member(db: Session, league_id: int, user: User, *, via: str) -> LeagueMember:
    # The league row lock serialises concurrent joins so the capacity check
    # and the insert commit together.
    league = db.execute(
        select(League).where(League.id == league_id).with_for_update()
    ).scalar_one_or_none()
    if not league:
        raise NotFoundError("league_not_found")

    membership = get_membership(db, league.id, user.id)
    if is_active(membership):
        raise ConflictError("already_member")
    if active_member_count(db, league.id) >= league.max_users:
        raise CapacityError()

    now = datetime.now(timezone.utc)
    if membership:
        membership.status = MEMBER_ACTIVE
        membership.joined_at = now
        membership.removed_at = None
        membership.removed_note = None
    else:
        membership = LeagueMember(
            league_id=league.id,
            user_id=user.id,
            status=MEMBER_ACTIVE,
            joined_at=now,
        )
        db.add(membership)

    log_action(
        db,
        category="league",
        action="join",
        actor_user_id=user.id,
        league_id=league.id,
        details={"via": via},
        commit=False,
    )
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("already_member")
    db.refresh(membership)
    logger.info("league:join league_id=%s user_id=%s via=%s", league.id, user.id, via)
    return membership


def join_by_code(db: Session, user: User, code: str) -> LeagueMember:
    normalized = (code or "").strip().upper()
    if not normalized:
        raise ValidationError("code_required")
    league_id = db.execute(
        select(League.id).where(League.join_code == normalized, League.visibility == "PRIVATE")
    ).scalar_one_or_none()
    if league_id is None:
        raise NotFoundError("league_not_found")
    return _admit_member(db, league_id, user, via="code")


def join_public(db: Session, user: User, league_id: int) -> LeagueMember:
    league = get_league(db, league_id)
    if league.visibility != "PUBLIC":
        raise NotFoundError("league_not_found")
    return _admit_member(db, league.id, user, via="public")


def leave_league(db: Session, user: User, league_id: int) -> LeagueMember:
    league = get_league(db, league_id)
    membership = get_membership(db, league.id, user.id)
    if not is_active(membership):
        raise NotFoundError("membership_not_found")
    if league.owner_user_id == user.id:
        raise ValidationError("owner_cannot_leave")

    membership.status = MEMBER_LEFT
    membership.removed_at = datetime.now(timezone.utc)
    log_action(
        db,
        category="league",
        action="leave",
        actor_user_id=user.id,
        league_id=league.id,
        commit=False,
    )
    db.commit()
    logger.info("league:leave league_id=%s user_id=%s", league.id, user.id)
    return membership
