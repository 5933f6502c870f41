"""Finishing-position encoding and position queries for league editions."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Sequence

from sportadmin.errors import ValidationError
from sportadmin.models import LeagueEdition, TeamStanding


WINNER_POSITION = 1
RUNNER_UP_POSITION = 2


def encode_positions(team_ids: Sequence[str], *, joint_winner: bool = False) -> List[TeamStanding]:
    """Assign positions to teams listed in finishing order.

    With ``joint_winner`` the first two teams share first place and the
    count resumes at 3, so no team holds position 2 in that edition.
    Runner-up lookups rely on that gap.
    """

    if joint_winner and len(team_ids) >= 2:
        positions = [1, 1] + [index + 1 for index in range(2, len(team_ids))]
    else:
        positions = [index + 1 for index in range(len(team_ids))]
    return [TeamStanding(team=team_id, position=position) for team_id, position in zip(team_ids, positions)]


def _coerce_position(raw: Any, index: int) -> int:
    if raw is None or raw == "":
        return index + 1
    if isinstance(raw, str) and raw.strip().isdigit():
        position = int(raw.strip())
    elif isinstance(raw, int) and not isinstance(raw, bool):
        position = raw
    elif isinstance(raw, float) and raw.is_integer():
        position = int(raw)
    else:
        raise ValidationError(f"Invalid position for team {index}")
    if position < 1:
        raise ValidationError(f"Position for team {index} must be at least 1")
    return position


def normalize_standings(
    entries: Iterable[Mapping[str, Any]],
    *,
    joint_winner: bool | None = None,
) -> List[TeamStanding]:
    """Validate raw team entries and resolve their positions.

    Every entry needs a team id. When ``joint_winner`` is given the positions
    are re-encoded from list order; otherwise supplied positions are kept and
    missing ones default to ``index + 1``.
    """

    team_ids: list[str] = []
    raw_positions: list[Any] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ValidationError(f"Missing fields for team {index}")
        team_id = entry.get("team")
        if not isinstance(team_id, str) or not team_id.strip():
            raise ValidationError(f"Missing fields for team {index}")
        team_ids.append(team_id.strip())
        raw_positions.append(entry.get("position"))

    if len(set(team_ids)) != len(team_ids):
        raise ValidationError("A team can only appear once per edition")

    if joint_winner is not None:
        return encode_positions(team_ids, joint_winner=joint_winner)
    return [
        TeamStanding(team=team_id, position=_coerce_position(raw, index))
        for index, (team_id, raw) in enumerate(zip(team_ids, raw_positions))
    ]


def entries_at(edition: LeagueEdition, position: int) -> List[TeamStanding]:
    return [standing for standing in edition.teams if standing.position == position]


def winners(edition: LeagueEdition) -> List[TeamStanding]:
    return entries_at(edition, WINNER_POSITION)


def runners_up(edition: LeagueEdition) -> List[TeamStanding]:
    return entries_at(edition, RUNNER_UP_POSITION)


def has_joint_winners(edition: LeagueEdition) -> bool:
    return len(winners(edition)) > 1


def team_finished_at(edition: LeagueEdition, team_ids: Iterable[str], position: int) -> bool:
    members = set(team_ids)
    return any(standing.team in members and standing.position == position for standing in edition.teams)
