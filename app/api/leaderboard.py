from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models import User
from app.schemas.leagues import LeaderboardEntryOut
from app.services.leaderboard import get_league_leaderboard

router = APIRouter(prefix="/leagues", tags=["leaderboard"])


@router.get("/{league_id}/leaderboard", response_model=List[LeaderboardEntryOut])
def league_leaderboard(
    league_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> List[LeaderboardEntryOut]:
    return get_league_leaderboard(db, league_id, user)
