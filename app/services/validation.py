from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

VISIBILITIES = {"PUBLIC", "PRIVATE"}
UPDATE_POLICIES = {"LOCK_PER_GAMEWEEK", "LOCK_ON_SUBMIT", "LIVE"}
MIN_LEAGUE_USERS = 2


def validate_league_settings(
    name: str,
    max_users: int,
    start_date: date,
    end_date: date,
    update_policy: str,
    visibility: str,
    team_size: Optional[int] = None,
) -> List[str]:
    errors: List[str] = []

    if not (name or "").strip():
        errors.append("name_required")
    if max_users < MIN_LEAGUE_USERS:
        errors.append("max_users_too_small")
    if start_date > end_date:
        errors.append("invalid_date_range")
    if update_policy not in UPDATE_POLICIES:
        errors.append("invalid_update_policy")
    if visibility not in VISIBILITIES:
        errors.append("invalid_visibility")
    if team_size is not None and team_size < 1:
        errors.append("invalid_team_size")

    return errors


def validate_captains(
    captain_id: Optional[int],
    vice_captain_id: Optional[int],
    selection: Iterable[int],
) -> List[str]:
    selected = set(selection)
    errors: List[str] = []

    if captain_id is not None and vice_captain_id is not None and captain_id == vice_captain_id:
        errors.append("captain_and_vice_same_card")
    if captain_id is not None and captain_id not in selected:
        errors.append("captain_not_in_selection")
    if vice_captain_id is not None and vice_captain_id not in selected:
        errors.append("vice_captain_not_in_selection")

    return errors


def validate_selection(
    card_ids: Iterable[int],
    owned_ids: Iterable[int],
    team_size: int,
) -> List[str]:
    ids = set(card_ids)
    errors: List[str] = []

    missing = sorted(ids - set(owned_ids))
    if missing:
        errors.append("cards_not_owned: " + ",".join(str(card_id) for card_id in missing))
    if len(ids) > team_size:
        errors.append("team_size_exceeded")

    return errors


def normalize_note(note: Optional[str]) -> Optional[str]:
    cleaned = (note or "").strip()
    return cleaned or None
