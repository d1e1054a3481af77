from __future__ import annotations

import json
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.models import ActionLog


def log_action(
    db: Session,
    *,
    category: str,
    action: str,
    actor_user_id: Optional[int] = None,
    league_id: Optional[int] = None,
    target_user_id: Optional[int] = None,
    details: Optional[dict[str, Any]] = None,
    commit: bool = True,
) -> None:
    """Record an audit entry.

    With ``commit=False`` the entry joins the caller's transaction, so it is
    written or discarded together with the change it describes.
    """
    payload = json.dumps(details, ensure_ascii=False, default=str) if details else None
    db.add(
        ActionLog(
            category=category,
            action=action,
            actor_user_id=actor_user_id,
            league_id=league_id,
            target_user_id=target_user_id,
            details=payload,
        )
    )
    if commit:
        db.commit()
