from __future__ import annotations

from fastapi import Depends, Header
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.security import decode_token
from app.db.session import get_db
from app.models import User
from app.services.errors import AuthError


def get_current_user(db: Session = Depends(get_db), authorization: str | None = Header(default=None)) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthError("missing_token", unauthenticated=True)
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_token(token)
    except JWTError:
        raise AuthError("invalid_token", unauthenticated=True)
    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("invalid_token", unauthenticated=True)
    user = db.get(User, int(user_id))
    if not user:
        raise AuthError("user_not_found", unauthenticated=True)
    return user


def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    settings = get_settings()
    if not x_admin_token or x_admin_token != settings.ADMIN_TOKEN:
        raise AuthError("invalid_admin_token", unauthenticated=True)
