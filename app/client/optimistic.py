from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class OptimisticCommand(Generic[T]):
    """A local state change paired with the request that makes it durable."""

    apply: Callable[[], None]
    revert: Callable[[], None]
    send: Callable[[], T]
    name: str = "command"


def run_optimistic(command: OptimisticCommand[T]) -> T:
    """Apply locally, send, and replay the inverse if the request fails.

    The original error is re-raised after the revert.
    """
    command.apply()
    try:
        return command.send()
    except Exception as exc:
        logger.info(
            "optimistic:revert command=%s detail=%s", command.name, getattr(exc, "detail", exc)
        )
        command.revert()
        raise
