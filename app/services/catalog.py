from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Match
from app.schemas.catalog import CompetitionOut


def list_formats(db: Session) -> List[str]:
    return (
        db.execute(select(Match.format).distinct().order_by(Match.format))
        .scalars()
        .all()
    )


def list_competitions(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[CompetitionOut]:
    query = select(Match.competition_id, Match.competition).where(Match.competition_id.is_not(None))
    if start_date:
        query = query.where(Match.match_date >= start_date)
    if end_date:
        query = query.where(Match.match_date <= end_date)
    rows = db.execute(query.order_by(Match.competition, Match.competition_id)).all()

    seen = set()
    competitions: List[CompetitionOut] = []
    for competition_id, competition in rows:
        if competition_id in seen:
            continue
        seen.add(competition_id)
        competitions.append(
            CompetitionOut(
                competition_id=competition_id,
                competition=competition or f"Competition {competition_id}",
            )
        )
    return competitions
