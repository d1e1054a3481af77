from __future__ import annotations

import logging
from typing import Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models import League, LeagueScore, User
from app.schemas.admin import AdminScoreRowIn
from app.schemas.leagues import LeaderboardEntryOut
from app.services.action_log import log_action
from app.services.leagues import require_league_access

logger = logging.getLogger(__name__)

UNNAMED = "Unnamed manager"


def get_league_leaderboard(db: Session, league_id: int, caller: User) -> List[LeaderboardEntryOut]:
    league, _ = require_league_access(db, league_id, caller)
    # Rank comes from the scoring engine; the row id keeps its order for ties.
    rows = db.execute(
        select(LeagueScore, User)
        .join(User, User.id == LeagueScore.user_id)
        .where(LeagueScore.league_id == league.id)
        .order_by(LeagueScore.rank, LeagueScore.id)
    ).all()
    return [
        LeaderboardEntryOut(
            user_id=user.id,
            display_name=user.display_name or UNNAMED,
            avatar_path=user.avatar_path,
            total_points=float(score.total_points or 0),
            rank=score.rank,
        )
        for score, user in rows
    ]


def replace_league_scores(db: Session, league: League, rows: Iterable[AdminScoreRowIn]) -> int:
    entries = list(rows)
    db.execute(delete(LeagueScore).where(LeagueScore.league_id == league.id))
    for row in entries:
        db.add(
            LeagueScore(
                league_id=league.id,
                user_id=row.user_id,
                total_points=row.total_points,
                rank=row.rank,
            )
        )
        db.flush()
    log_action(
        db,
        category="admin",
        action="replace_scores",
        league_id=league.id,
        details={"rows": len(entries)},
        commit=False,
    )
    db.commit()
    logger.info("leaderboard:replace league_id=%s rows=%s", league.id, len(entries))
    return len(entries)
