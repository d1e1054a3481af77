from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models import LeagueTeam, User
from app.services.action_log import log_action
from app.services.errors import ValidationError
from app.services.leagues import require_active_member
from app.services.roster import lock_team, selected_card_ids
from app.services.validation import validate_captains

logger = logging.getLogger(__name__)


def set_captains(
    db: Session,
    league_id: int,
    user: User,
    captain_id: Optional[int],
    vice_captain_id: Optional[int],
) -> LeagueTeam:
    """Point captain and vice-captain at cards of the current selection.

    All checks run against the locked team row before anything changes;
    passing both ids as ``None`` clears them.
    """
    league, _ = require_active_member(db, league_id, user)
    team = lock_team(db, league.id, user.id)

    errors = validate_captains(captain_id, vice_captain_id, selected_card_ids(db, team.id))
    if errors:
        raise ValidationError(errors)

    team.captain_league_card_id = captain_id
    team.vice_captain_league_card_id = vice_captain_id
    team.updated_at = datetime.now(timezone.utc)
    log_action(
        db,
        category="roster",
        action="set_captains",
        actor_user_id=user.id,
        league_id=league.id,
        details={"captain": captain_id, "vice_captain": vice_captain_id},
        commit=False,
    )
    db.commit()
    db.refresh(team)
    logger.info(
        "roster:set_captains league_id=%s user_id=%s captain=%s vice=%s",
        league.id,
        user.id,
        captain_id,
        vice_captain_id,
    )
    return team
