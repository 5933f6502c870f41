"""Taxonomy models."""

from .taxonomy import (
    TEAM_TYPE_FOR_TOURNAMENT,
    LeagueEdition,
    LeagueTeam,
    NationalTeam,
    Sport,
    Team,
    TeamStanding,
    TeamType,
    Tournament,
    TournamentType,
    build_edition,
    build_sport,
    build_team,
    build_tournament,
    team_from_dict,
    utcnow,
)

__all__ = [
    "TEAM_TYPE_FOR_TOURNAMENT",
    "LeagueEdition",
    "LeagueTeam",
    "NationalTeam",
    "Sport",
    "Team",
    "TeamStanding",
    "TeamType",
    "Tournament",
    "TournamentType",
    "build_edition",
    "build_sport",
    "build_team",
    "build_tournament",
    "team_from_dict",
    "utcnow",
]
