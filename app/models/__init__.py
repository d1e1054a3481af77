from app.models.tables import (
    ActionLog,
    Card,
    Country,
    League,
    LeagueCard,
    LeagueMember,
    LeagueScore,
    LeagueTeam,
    LeagueTeamCard,
    Match,
    Player,
    User,
)

__all__ = [
    "ActionLog",
    "Card",
    "Country",
    "League",
    "LeagueCard",
    "LeagueMember",
    "LeagueScore",
    "LeagueTeam",
    "LeagueTeamCard",
    "Match",
    "Player",
    "User",
]
