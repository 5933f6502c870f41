"""League edition reference checks and population of referenced records."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from sportadmin.errors import ValidationError
from sportadmin.models import (
    TEAM_TYPE_FOR_TOURNAMENT,
    LeagueEdition,
    LeagueTeam,
    NationalTeam,
    Sport,
    TeamStanding,
    Tournament,
)
from sportadmin.persistence import TaxonomyStore


class PopulatedStanding(BaseModel):
    team_id: str
    position: int
    team: Optional[Union[NationalTeam, LeagueTeam]] = None


class PopulatedEdition(BaseModel):
    """A league edition with its references resolved.

    References that no longer resolve (the record was deleted) come back as
    ``None`` alongside the raw id.
    """

    id: str
    name: str
    year: int
    league_image_url: str
    sport_id: str
    tournament_id: str
    sport: Optional[Sport] = None
    tournament: Optional[Tournament] = None
    teams: List[PopulatedStanding] = Field(default_factory=list)


def check_edition_references(
    store: TaxonomyStore,
    *,
    sport: str,
    tournament: str,
    standings: Sequence[TeamStanding],
) -> Tournament:
    if store.get_sport(sport) is None:
        raise ValidationError("Unknown sport")
    tournament_record = store.get_tournament(tournament)
    if tournament_record is None:
        raise ValidationError("Unknown tournament")
    if tournament_record.sport != sport:
        raise ValidationError("Tournament does not belong to the selected sport")
    expected_type = TEAM_TYPE_FOR_TOURNAMENT[tournament_record.type]
    for index, standing in enumerate(standings):
        team = store.get_team(standing.team)
        if team is None:
            raise ValidationError(f"Unknown team for entry {index}")
        if team.sport != sport:
            raise ValidationError(f"Team for entry {index} belongs to another sport")
        if team.type != expected_type:
            raise ValidationError(
                f"{tournament_record.type} tournaments only accept {expected_type} teams (entry {index})"
            )
    return tournament_record


class _RecordCache:
    def __init__(self, store: TaxonomyStore):
        self._store = store
        self._sports: Dict[str, Optional[Sport]] = {}
        self._tournaments: Dict[str, Optional[Tournament]] = {}
        self._teams: Dict[str, Optional[Union[NationalTeam, LeagueTeam]]] = {}

    def sport(self, sport_id: str) -> Optional[Sport]:
        if sport_id not in self._sports:
            self._sports[sport_id] = self._store.get_sport(sport_id)
        return self._sports[sport_id]

    def tournament(self, tournament_id: str) -> Optional[Tournament]:
        if tournament_id not in self._tournaments:
            self._tournaments[tournament_id] = self._store.get_tournament(tournament_id)
        return self._tournaments[tournament_id]

    def team(self, team_id: str) -> Optional[Union[NationalTeam, LeagueTeam]]:
        if team_id not in self._teams:
            self._teams[team_id] = self._store.get_team(team_id)
        return self._teams[team_id]


def populate_editions(store: TaxonomyStore, editions: Iterable[LeagueEdition]) -> List[PopulatedEdition]:
    cache = _RecordCache(store)
    populated: list[PopulatedEdition] = []
    for edition in editions:
        populated.append(
            PopulatedEdition(
                id=edition.id,
                name=edition.name,
                year=edition.year,
                league_image_url=edition.league_image_url,
                sport_id=edition.sport,
                tournament_id=edition.tournament,
                sport=cache.sport(edition.sport),
                tournament=cache.tournament(edition.tournament),
                teams=[
                    PopulatedStanding(
                        team_id=standing.team,
                        position=standing.position,
                        team=cache.team(standing.team),
                    )
                    for standing in edition.teams
                ],
            )
        )
    return populated


def sort_by_year(editions: Iterable[LeagueEdition]) -> List[LeagueEdition]:
    return sorted(editions, key=lambda edition: edition.year)


def list_by_tournament(store: TaxonomyStore, sport: str, tournament: str) -> List[PopulatedEdition]:
    """All editions of a (sport, tournament) pair, oldest year first."""
    editions = store.list_leagues(sport=sport, tournament=tournament)
    return populate_editions(store, sort_by_year(editions))
