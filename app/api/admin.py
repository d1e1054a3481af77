from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.db.session import get_db
from app.models import ActionLog, Card, Country, Match, Player, User
from app.schemas.admin import (
    AdminActionLogOut,
    AdminCardIn,
    AdminCardOut,
    AdminLeaderboardIn,
    AdminLeagueCardGrantIn,
    AdminLeagueCardOut,
    AdminMatchesUpsertIn,
    AdminPlayersUpsertIn,
)
from app.services.action_log import log_action
from app.services.inventory import grant_league_card
from app.services.leaderboard import replace_league_scores
from app.services.leagues import get_league

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _upsert(db: Session, model, row_id: int, values: dict) -> bool:
    """Update the row with ``row_id`` or insert it; returns True on insert."""
    updated = db.execute(update(model).where(model.id == row_id).values(**values))
    if updated.rowcount:
        return False
    db.execute(insert(model).values(id=row_id, **values))
    return True


def _commit_or_400(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        detail = "db_integrity_error"
        if exc.orig:
            detail = f"db_integrity_error: {exc.orig}"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"db_error: {exc}")


@router.post("/players")
def upsert_players(payload: AdminPlayersUpsertIn, db: Session = Depends(get_db)) -> dict:
    inserted = 0
    for item in payload.players:
        if item.country:
            _upsert(
                db,
                Country,
                item.country.id,
                {
                    "short_name": item.country.short_name,
                    "name": item.country.name,
                    "logo": item.country.logo,
                },
            )
        values = {
            "full_name": item.full_name.strip(),
            "name_display": (item.name_display or item.full_name).strip(),
            "role": item.role,
            "tier": item.tier,
            "country_id": item.country.id if item.country else None,
            "image": item.image,
        }
        if _upsert(db, Player, item.id, values):
            inserted += 1
    _commit_or_400(db)
    log_action(
        db,
        category="admin",
        action="upsert_players",
        details={"count": len(payload.players), "inserted": inserted},
    )
    return {"ok": True, "count": len(payload.players), "inserted": inserted}


@router.post("/cards", response_model=AdminCardOut)
def award_card(payload: AdminCardIn, db: Session = Depends(get_db)) -> AdminCardOut:
    if not db.get(User, payload.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user_not_found")
    if not db.get(Player, payload.player_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="player_not_found")
    card = Card(
        user_id=payload.user_id,
        player_id=payload.player_id,
        card_type=payload.card_type,
        edition=payload.edition,
        minted_on=payload.minted_on,
    )
    db.add(card)
    _commit_or_400(db)
    db.refresh(card)
    return AdminCardOut(
        id=card.id,
        user_id=card.user_id,
        player_id=card.player_id,
        card_type=card.card_type,
        edition=card.edition,
        minted_on=card.minted_on,
    )


@router.post("/leagues/{league_id}/cards", response_model=AdminLeagueCardOut)
def grant_card(
    league_id: int,
    payload: AdminLeagueCardGrantIn,
    db: Session = Depends(get_db),
) -> AdminLeagueCardOut:
    league = get_league(db, league_id)
    if not db.get(User, payload.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user_not_found")
    league_card = grant_league_card(db, league, payload.user_id, payload.player_id)
    log_action(
        db,
        category="admin",
        action="grant_league_card",
        league_id=league.id,
        target_user_id=payload.user_id,
        details={"league_card_id": league_card.id, "player_id": payload.player_id},
    )
    return AdminLeagueCardOut(
        league_card_id=league_card.id,
        league_id=league_card.league_id,
        user_id=league_card.user_id,
        player_id=league_card.player_id,
        source_kind=league_card.source_kind,
    )


@router.post("/matches")
def upsert_matches(payload: AdminMatchesUpsertIn, db: Session = Depends(get_db)) -> dict:
    inserted = 0
    for item in payload.matches:
        values = {
            "match_date": item.match_date,
            "format": item.format.strip().upper(),
            "competition_id": item.competition_id,
            "competition": item.competition.strip() if item.competition else None,
            "match_name": item.match_name.strip(),
            "venue": item.venue.strip() if item.venue else None,
        }
        if _upsert(db, Match, item.id, values):
            inserted += 1
    _commit_or_400(db)
    log_action(
        db,
        category="admin",
        action="upsert_matches",
        details={"count": len(payload.matches), "inserted": inserted},
    )
    return {"ok": True, "count": len(payload.matches), "inserted": inserted}


@router.put("/leagues/{league_id}/leaderboard")
def replace_leaderboard(
    league_id: int,
    payload: AdminLeaderboardIn,
    db: Session = Depends(get_db),
) -> dict:
    league = get_league(db, league_id)
    count = replace_league_scores(db, league, payload.rows)
    return {"ok": True, "league_id": league.id, "rows": count}


@router.get("/logs", response_model=List[AdminActionLogOut])
def list_logs(
    category: Optional[str] = Query(default=None),
    league_id: Optional[int] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
) -> List[AdminActionLogOut]:
    query = (
        select(ActionLog, User)
        .outerjoin(User, User.id == ActionLog.actor_user_id)
        .order_by(ActionLog.created_at.desc(), ActionLog.id.desc())
        .limit(limit)
    )
    if category:
        query = query.where(ActionLog.category == category)
    if league_id is not None:
        query = query.where(ActionLog.league_id == league_id)
    rows = db.execute(query).all()
    return [
        AdminActionLogOut(
            id=log.id,
            category=log.category,
            action=log.action,
            created_at=log.created_at,
            actor_user_id=log.actor_user_id,
            actor_email=user.email if user else None,
            league_id=log.league_id,
            target_user_id=log.target_user_id,
            details=log.details,
        )
        for log, user in rows
    ]
