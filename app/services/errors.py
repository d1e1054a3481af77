from __future__ import annotations

from typing import Any, List, Optional


class LeagueError(Exception):
    status_code = 400
    default_detail = "league_error"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_payload(self) -> Any:
        return self.detail


class ValidationError(LeagueError):
    status_code = 400
    default_detail = "validation_failed"

    def __init__(self, errors: List[str] | str) -> None:
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__(self.errors[0] if len(self.errors) == 1 else "validation_failed")

    def to_payload(self) -> Any:
        return self.errors


class AuthError(LeagueError):
    status_code = 403
    default_detail = "forbidden"

    def __init__(self, detail: Optional[str] = None, *, unauthenticated: bool = False) -> None:
        super().__init__(detail)
        if unauthenticated:
            self.status_code = 401


class NotFoundError(LeagueError):
    status_code = 404
    default_detail = "not_found"


class ConflictError(LeagueError):
    status_code = 409
    default_detail = "conflict"


class CapacityError(ConflictError):
    default_detail = "league_full"


class RateLimitError(LeagueError):
    status_code = 429
    default_detail = "rate_limited"
