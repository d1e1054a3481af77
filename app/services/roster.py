from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import LeagueTeam, LeagueTeamCard, User
from app.schemas.roster import TeamOut
from app.services.action_log import log_action
from app.services.errors import NotFoundError, ValidationError
from app.services.inventory import owned_league_card_ids, sync_league_cards
from app.services.leagues import league_team_size, require_active_member
from app.services.validation import validate_selection

logger = logging.getLogger(__name__)

MINT_ATTEMPTS = 3


def _find_team(db: Session, league_id: int, user_id: int) -> Optional[LeagueTeam]:
    return db.execute(
        select(LeagueTeam).where(LeagueTeam.league_id == league_id, LeagueTeam.user_id == user_id)
    ).scalar_one_or_none()


def lock_team(db: Session, league_id: int, user_id: int) -> LeagueTeam:
    team = db.execute(
        select(LeagueTeam)
        .where(LeagueTeam.league_id == league_id, LeagueTeam.user_id == user_id)
        .with_for_update()
    ).scalar_one_or_none()
    if not team:
        raise NotFoundError("team_not_found")
    return team


def selected_card_ids(db: Session, submission_id: int) -> List[int]:
    return (
        db.execute(
            select(LeagueTeamCard.league_card_id)
            .where(LeagueTeamCard.submission_id == submission_id)
            .order_by(LeagueTeamCard.league_card_id)
        )
        .scalars()
        .all()
    )


def team_out(db: Session, team: LeagueTeam) -> TeamOut:
    return TeamOut(
        submission_id=team.id,
        league_id=team.league_id,
        user_id=team.user_id,
        captain_league_card_id=team.captain_league_card_id,
        vice_captain_league_card_id=team.vice_captain_league_card_id,
        league_card_ids=selected_card_ids(db, team.id),
        created_at=team.created_at,
        updated_at=team.updated_at,
    )


def _mint_owned_cards(db: Session, league_id: int, user_id: int) -> None:
    # A concurrent caller may mint the same backing cards first; its rows win
    # and the next pass only picks up what is still missing.
    for attempt in range(1, MINT_ATTEMPTS + 1):
        if not sync_league_cards(db, league_id, user_id):
            return
        try:
            db.commit()
            return
        except IntegrityError:
            db.rollback()
            logger.info(
                "roster:mint_conflict league_id=%s user_id=%s attempt=%s", league_id, user_id, attempt
            )
            if attempt == MINT_ATTEMPTS:
                raise


def ensure_team(db: Session, league_id: int, user: User) -> LeagueTeam:
    """Return the caller's team for the league, creating it on first use.

    Safe to call repeatedly and concurrently: the unique constraints on
    minted cards and on (league, user) decide the race, and the loser reads
    the winner's rows.
    """
    league, _ = require_active_member(db, league_id, user)

    _mint_owned_cards(db, league.id, user.id)

    team = _find_team(db, league.id, user.id)
    if team:
        return team

    team = LeagueTeam(league_id=league.id, user_id=user.id)
    db.add(team)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        team = _find_team(db, league.id, user.id)
        if team is None:
            raise
        return team
    db.refresh(team)
    logger.info("roster:create_team league_id=%s user_id=%s", league.id, user.id)
    return team


def get_team(db: Session, league_id: int, user: User) -> LeagueTeam:
    league, _ = require_active_member(db, league_id, user)
    team = _find_team(db, league.id, user.id)
    if not team:
        raise NotFoundError("team_not_found")
    return team


def set_selection(db: Session, league_id: int, user: User, card_ids: Iterable[int]) -> LeagueTeam:
    league, _ = require_active_member(db, league_id, user)
    requested = set(card_ids)

    team = lock_team(db, league.id, user.id)
    owned = owned_league_card_ids(db, league.id, user.id)
    errors = validate_selection(requested, owned, league_team_size(league))
    if errors:
        raise ValidationError(errors)

    current = set(selected_card_ids(db, team.id))
    dropped = current - requested
    if dropped:
        db.execute(
            delete(LeagueTeamCard).where(
                LeagueTeamCard.submission_id == team.id,
                LeagueTeamCard.league_card_id.in_(sorted(dropped)),
            )
        )
    now = datetime.now(timezone.utc)
    for card_id in sorted(requested - current):
        db.add(LeagueTeamCard(submission_id=team.id, league_card_id=card_id, selected_at=now))

    cleared = []
    if team.captain_league_card_id is not None and team.captain_league_card_id not in requested:
        team.captain_league_card_id = None
        cleared.append("captain")
    if (
        team.vice_captain_league_card_id is not None
        and team.vice_captain_league_card_id not in requested
    ):
        team.vice_captain_league_card_id = None
        cleared.append("vice_captain")
    team.updated_at = now

    log_action(
        db,
        category="roster",
        action="set_selection",
        actor_user_id=user.id,
        league_id=league.id,
        details={"count": len(requested), "cleared": cleared} if cleared else {"count": len(requested)},
        commit=False,
    )
    db.commit()
    db.refresh(team)
    logger.info(
        "roster:set_selection league_id=%s user_id=%s count=%s cleared=%s",
        league.id,
        user.id,
        len(requested),
        ",".join(cleared) or "-",
    )
    return team
