from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.catalog import CompetitionOut
from app.services.catalog import list_competitions, list_formats
from app.services.errors import ValidationError

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/formats", response_model=List[str])
def formats(db: Session = Depends(get_db)) -> List[str]:
    return list_formats(db)


@router.get("/competitions", response_model=List[CompetitionOut])
def competitions(
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
) -> List[CompetitionOut]:
    if start and end and start > end:
        raise ValidationError("invalid_date_range")
    return list_competitions(db, start, end)
