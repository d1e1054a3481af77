from __future__ import annotations

from typing import Any, Dict, Optional, Set

from app.client.api import LeagueClient
from app.client.optimistic import OptimisticCommand, run_optimistic


class RosterDraft:
    """Local view of one team that updates before the server confirms."""

    def __init__(self, client: LeagueClient, league_id: int) -> None:
        self.client = client
        self.league_id = league_id
        self.selected: Set[int] = set()
        self.captain_id: Optional[int] = None
        self.vice_captain_id: Optional[int] = None

    def _snapshot(self) -> tuple:
        return set(self.selected), self.captain_id, self.vice_captain_id

    def _restore(self, snapshot: tuple) -> None:
        self.selected, self.captain_id, self.vice_captain_id = set(snapshot[0]), snapshot[1], snapshot[2]

    def _absorb(self, team: Dict[str, Any]) -> Dict[str, Any]:
        self.selected = set(team.get("league_card_ids") or [])
        self.captain_id = team.get("captain_league_card_id")
        self.vice_captain_id = team.get("vice_captain_league_card_id")
        return team

    def load(self) -> Dict[str, Any]:
        return self._absorb(self.client.ensure_team(self.league_id))

    def toggle(self, league_card_id: int) -> Dict[str, Any]:
        before = self._snapshot()

        def apply() -> None:
            if league_card_id in self.selected:
                self.selected.discard(league_card_id)
                if self.captain_id == league_card_id:
                    self.captain_id = None
                if self.vice_captain_id == league_card_id:
                    self.vice_captain_id = None
            else:
                self.selected.add(league_card_id)

        def send() -> Dict[str, Any]:
            return self._absorb(self.client.set_selection(self.league_id, sorted(self.selected)))

        return run_optimistic(
            OptimisticCommand(apply=apply, revert=lambda: self._restore(before), send=send, name="toggle")
        )

    def set_captains(self, captain_id: Optional[int], vice_captain_id: Optional[int]) -> Dict[str, Any]:
        before = self._snapshot()

        def apply() -> None:
            self.captain_id = captain_id
            self.vice_captain_id = vice_captain_id

        def send() -> Dict[str, Any]:
            return self._absorb(self.client.set_captains(self.league_id, captain_id, vice_captain_id))

        return run_optimistic(
            OptimisticCommand(apply=apply, revert=lambda: self._restore(before), send=send, name="captains")
        )
