from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models import User
from app.schemas.roster import CaptainsUpdateIn, LeagueCardOut, SelectionUpdateIn, TeamOut
from app.services.captaincy import set_captains
from app.services.inventory import list_eligible_cards
from app.services.roster import ensure_team, get_team, set_selection, team_out

router = APIRouter(prefix="/leagues/{league_id}/team", tags=["roster"])


@router.post("", response_model=TeamOut)
def create_team(
    league_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> TeamOut:
    return team_out(db, ensure_team(db, league_id, user))


@router.get("", response_model=TeamOut)
def read_team(
    league_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> TeamOut:
    return team_out(db, get_team(db, league_id, user))


@router.get("/cards", response_model=List[LeagueCardOut])
def list_cards(
    league_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> List[LeagueCardOut]:
    team = ensure_team(db, league_id, user)
    return list_eligible_cards(db, team.league_id, user.id, submission_id=team.id)


@router.put("/cards", response_model=TeamOut)
def update_selection(
    league_id: int,
    payload: SelectionUpdateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> TeamOut:
    ensure_team(db, league_id, user)
    team = set_selection(db, league_id, user, payload.league_card_ids)
    return team_out(db, team)


@router.put("/captains", response_model=TeamOut)
def update_captains(
    league_id: int,
    payload: CaptainsUpdateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> TeamOut:
    team = set_captains(
        db,
        league_id,
        user,
        payload.captain_league_card_id,
        payload.vice_captain_league_card_id,
    )
    return team_out(db, team)
