from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from app.core.config import get_settings
from app.services.errors import (
    AuthError,
    CapacityError,
    ConflictError,
    LeagueError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class RequestFailed(LeagueError):
    """The request never produced a response; the outcome is unknown."""

    status_code = 503
    default_detail = "request_failed"
    retryable = True


def _detail(resp: requests.Response) -> Any:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:500] or None
    if isinstance(body, dict):
        return body.get("detail")
    return body


def raise_for_response(resp: requests.Response) -> None:
    """Map an error response back to the service error it came from."""
    if resp.ok:
        return
    detail = _detail(resp)
    status = resp.status_code
    if status in (400, 422):
        if isinstance(detail, list):
            # FastAPI request validation errors are dicts; keep their messages.
            errors = [item.get("msg", str(item)) if isinstance(item, dict) else str(item) for item in detail]
            raise ValidationError(errors or "validation_failed")
        raise ValidationError(str(detail or "validation_failed"))
    if status == 401:
        raise AuthError(detail, unauthenticated=True)
    if status == 403:
        raise AuthError(detail)
    if status == 404:
        raise NotFoundError(detail)
    if status == 409:
        if detail == CapacityError.default_detail:
            raise CapacityError(detail)
        raise ConflictError(detail)
    if status == 429:
        raise RateLimitError(detail)
    error = LeagueError(str(detail) if detail else f"http_{status}")
    error.status_code = status
    raise error


class LeagueClient:
    """Thin HTTP client for the league service.

    Every call uses a bounded timeout and is attempted exactly once.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else get_settings().REQUEST_TIMEOUT_SECONDS

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            logger.warning("client:request_failed method=%s path=%s error=%s", method, path, exc)
            raise RequestFailed(f"request_failed: {exc.__class__.__name__}") from exc
        raise_for_response(resp)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("client:bad_body method=%s path=%s status=%s", method, path, resp.status_code)
            raise RequestFailed("invalid_response_body") from exc

    def login(self, email: str, password: str) -> str:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        return self.token

    def create_league(self, name: str, start_date: str, end_date: str, **fields: Any) -> Dict[str, Any]:
        payload = {"name": name, "start_date": start_date, "end_date": end_date, **fields}
        return self._request("POST", "/leagues", json=payload)

    def discover_public_leagues(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/leagues/public")

    def list_my_leagues(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/leagues/mine")

    def get_league(self, league_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/leagues/{league_id}")

    def join_by_code(self, code: str) -> Dict[str, Any]:
        return self._request("POST", "/leagues/join", json={"code": code})

    def join_public(self, league_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/leagues/{league_id}/join")

    def leave_league(self, league_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/leagues/{league_id}/leave")

    def list_members(self, league_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/leagues/{league_id}/members")

    def kick_member(self, league_id: int, user_id: int, note: Optional[str] = None) -> Dict[str, Any]:
        return self._request(
            "POST", f"/leagues/{league_id}/members/{user_id}/kick", json={"note": note}
        )

    def delete_league(self, league_id: int, note: str) -> Dict[str, Any]:
        if not (note or "").strip():
            raise ValidationError("delete_note_required")
        return self._request("POST", f"/leagues/{league_id}/delete", json={"note": note.strip()})

    def ensure_team(self, league_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/leagues/{league_id}/team")

    def get_team(self, league_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/leagues/{league_id}/team")

    def list_eligible_cards(self, league_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/leagues/{league_id}/team/cards")

    def set_selection(self, league_id: int, card_ids: Iterable[int]) -> Dict[str, Any]:
        return self._request(
            "PUT", f"/leagues/{league_id}/team/cards", json={"league_card_ids": list(card_ids)}
        )

    def set_captains(
        self,
        league_id: int,
        captain_id: Optional[int],
        vice_captain_id: Optional[int],
    ) -> Dict[str, Any]:
        payload = {
            "captain_league_card_id": captain_id,
            "vice_captain_league_card_id": vice_captain_id,
        }
        return self._request("PUT", f"/leagues/{league_id}/team/captains", json=payload)

    def get_leaderboard(self, league_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/leagues/{league_id}/leaderboard")
