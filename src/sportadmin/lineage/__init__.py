"""Team lineage resolution and win / runner-up aggregation."""

from .resolver import (
    Lineage,
    TeamHistory,
    aggregate_history,
    populate_history,
    resolve_lineage,
    team_history,
)

__all__ = [
    "Lineage",
    "TeamHistory",
    "aggregate_history",
    "populate_history",
    "resolve_lineage",
    "team_history",
]
