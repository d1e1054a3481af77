from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from app.services.errors import LeagueError, ValidationError

logger = logging.getLogger(__name__)


class Phase(str, enum.Enum):
    IDLE = "IDLE"
    CONFIRM_1 = "CONFIRM_1"
    CONFIRM_2 = "CONFIRM_2"
    EXECUTING = "EXECUTING"
    DELETED = "DELETED"


class InvalidTransition(Exception):
    def __init__(self, phase: Phase, event: str) -> None:
        super().__init__(f"{event} not allowed in {phase.value}")
        self.phase = phase
        self.event = event


class DeleteConfirmation:
    """Two-step confirmation in front of an irreversible league deletion.

    ``IDLE -> CONFIRM_1 -> CONFIRM_2 -> EXECUTING -> DELETED``; a failed
    deletion falls back to ``CONFIRM_2`` with ``error`` set. Unexpected
    exceptions also return to ``CONFIRM_2`` before propagating. ``cancel`` returns
    to ``IDLE`` from anywhere except ``EXECUTING`` and ``DELETED``.
    """

    def __init__(self, delete: Callable[[str], object]) -> None:
        self._delete = delete
        self.phase = Phase.IDLE
        self.note = ""
        self.error: Optional[LeagueError] = None

    def _require(self, event: str, *allowed: Phase) -> None:
        if self.phase not in allowed:
            raise InvalidTransition(self.phase, event)

    def start(self) -> Phase:
        self._require("start", Phase.IDLE)
        self.phase = Phase.CONFIRM_1
        return self.phase

    def confirm(self) -> Phase:
        self._require("confirm", Phase.CONFIRM_1)
        self.phase = Phase.CONFIRM_2
        return self.phase

    def set_note(self, note: str) -> None:
        self._require("set_note", Phase.CONFIRM_2)
        self.note = note or ""

    @property
    def can_execute(self) -> bool:
        return self.phase == Phase.CONFIRM_2 and bool(self.note.strip())

    def execute(self) -> Phase:
        self._require("execute", Phase.CONFIRM_2)
        if not self.note.strip():
            raise ValidationError("delete_note_required")
        self.phase = Phase.EXECUTING
        self.error = None
        try:
            self._delete(self.note.strip())
        except LeagueError as exc:
            logger.warning("confirmation:delete_failed detail=%s", exc.detail)
            self.error = exc
            self.phase = Phase.CONFIRM_2
            return self.phase
        except Exception:
            logger.exception("confirmation:delete_crashed")
            self.phase = Phase.CONFIRM_2
            raise
        self.phase = Phase.DELETED
        return self.phase

    def cancel(self) -> Phase:
        self._require("cancel", Phase.IDLE, Phase.CONFIRM_1, Phase.CONFIRM_2)
        self.phase = Phase.IDLE
        self.note = ""
        self.error = None
        return self.phase
