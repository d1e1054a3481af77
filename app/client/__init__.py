from app.client.api import LeagueClient, RequestFailed
from app.client.confirmation import DeleteConfirmation, InvalidTransition, Phase
from app.client.optimistic import OptimisticCommand, run_optimistic
from app.client.roster_draft import RosterDraft

__all__ = [
    "DeleteConfirmation",
    "InvalidTransition",
    "LeagueClient",
    "OptimisticCommand",
    "Phase",
    "RequestFailed",
    "RosterDraft",
    "run_optimistic",
]
