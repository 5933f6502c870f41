"""Team identity across renames and relocations.

A team has no explicit franchise record. Records of the same type that share
a sport and a city (League teams) or a sport and a country (National teams)
are treated as one logical team seen at different points in its history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple, Union

from sportadmin.errors import NotFoundError
from sportadmin.models import LeagueEdition, LeagueTeam, NationalTeam
from sportadmin.persistence import TaxonomyStore
from sportadmin.standings import (
    RUNNER_UP_POSITION,
    WINNER_POSITION,
    PopulatedEdition,
    populate_editions,
    sort_by_year,
    team_finished_at,
)


logger = logging.getLogger(__name__)

AnyTeam = Union[NationalTeam, LeagueTeam]


@dataclass(frozen=True)
class Lineage:
    """Identity group of a team, oldest record first."""

    team: AnyTeam
    members: Tuple[AnyTeam, ...]
    current: AnyTeam

    @property
    def member_ids(self) -> Tuple[str, ...]:
        return tuple(member.id for member in self.members)


@dataclass(frozen=True)
class TeamHistory:
    lineage: Lineage
    editions: Tuple[LeagueEdition, ...]
    won: Tuple[LeagueEdition, ...]
    runner_up: Tuple[LeagueEdition, ...]


def _lineage_members(store: TaxonomyStore, team: AnyTeam) -> List[AnyTeam]:
    team_type, sport, place = team.identity_key
    place_field = "city" if isinstance(team, LeagueTeam) else "country"
    return store.list_teams(type=team_type, sport=sport, **{place_field: place})


def _current_member(team: AnyTeam, members: List[AnyTeam]) -> AnyTeam:
    active = [member for member in members if not member.inactive]
    if not active:
        return team
    # members arrive in creation order; the last active one is the newest
    return max(enumerate(active), key=lambda item: (item[1].created_at, item[0]))[1]


def resolve_lineage(store: TaxonomyStore, team_id: str) -> Lineage:
    team = store.get_team(team_id)
    if team is None:
        raise NotFoundError("Team not found")
    members = _lineage_members(store, team)
    if not any(member.id == team.id for member in members):
        members = [team]
    return Lineage(team=team, members=tuple(members), current=_current_member(team, members))


def aggregate_history(store: TaxonomyStore, lineage: Lineage) -> TeamHistory:
    """Collect editions in which any lineage member won or finished second.

    Editions are fetched per member, then de-duplicated by id once before the
    won and runner-up filters run, so an edition listing two members of the
    same lineage is counted a single time in each set.
    """

    unique: Dict[str, LeagueEdition] = {}
    for member_id in lineage.member_ids:
        for edition in store.list_leagues(team=member_id):
            unique.setdefault(edition.id, edition)

    editions = sort_by_year(unique.values())
    member_ids = lineage.member_ids
    won = [edition for edition in editions if team_finished_at(edition, member_ids, WINNER_POSITION)]
    runner_up = [edition for edition in editions if team_finished_at(edition, member_ids, RUNNER_UP_POSITION)]
    logger.debug(
        "Lineage of %s spans %d teams, %d editions (%d won, %d runner-up)",
        lineage.team.id,
        len(member_ids),
        len(editions),
        len(won),
        len(runner_up),
    )
    return TeamHistory(
        lineage=lineage,
        editions=tuple(editions),
        won=tuple(won),
        runner_up=tuple(runner_up),
    )


def team_history(store: TaxonomyStore, team_id: str) -> TeamHistory:
    return aggregate_history(store, resolve_lineage(store, team_id))


def populate_history(store: TaxonomyStore, history: TeamHistory) -> Tuple[List[PopulatedEdition], List[PopulatedEdition]]:
    return populate_editions(store, history.won), populate_editions(store, history.runner_up)
