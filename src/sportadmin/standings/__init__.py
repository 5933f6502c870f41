"""League edition standings (position encoding, queries, population)."""

from .editions import (
    PopulatedEdition,
    PopulatedStanding,
    check_edition_references,
    list_by_tournament,
    populate_editions,
    sort_by_year,
)
from .positions import (
    RUNNER_UP_POSITION,
    WINNER_POSITION,
    encode_positions,
    entries_at,
    has_joint_winners,
    normalize_standings,
    runners_up,
    team_finished_at,
    winners,
)

__all__ = [
    "PopulatedEdition",
    "PopulatedStanding",
    "RUNNER_UP_POSITION",
    "WINNER_POSITION",
    "check_edition_references",
    "encode_positions",
    "entries_at",
    "has_joint_winners",
    "list_by_tournament",
    "normalize_standings",
    "populate_editions",
    "runners_up",
    "sort_by_year",
    "team_finished_at",
    "winners",
]
