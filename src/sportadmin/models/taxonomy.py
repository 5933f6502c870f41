"""Canonical taxonomy records shared by the store, the services and the API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, List, Literal, Optional, Union
from uuid import uuid4

import pydantic
from pydantic import BaseModel, Field, TypeAdapter
from pydantic.config import ConfigDict

from sportadmin.errors import ValidationError


TournamentType = Literal["International", "League"]
TeamType = Literal["National", "League"]

# Team type that may take part in each tournament type.
TEAM_TYPE_FOR_TOURNAMENT: dict[str, str] = {
    "International": "National",
    "League": "League",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


class Record(BaseModel):
    """Fields every persisted record carries."""

    id: str = Field(default_factory=new_id, min_length=1)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class Sport(Record):
    name: str = Field(..., min_length=1)
    image_url: str = Field(..., min_length=1)


class Tournament(Record):
    name: str = Field(..., min_length=1)
    sport: str = Field(..., min_length=1)
    type: TournamentType
    image_url: str = Field(..., min_length=1)
    priority: Optional[float] = None


class TeamBase(Record):
    name: str = Field(..., min_length=1)
    image_url: str = Field(..., min_length=1)
    sport: str = Field(..., min_length=1)
    inactive: bool = False


class NationalTeam(TeamBase):
    type: Literal["National"] = "National"
    country: str = Field(..., min_length=1)

    @property
    def identity_key(self) -> tuple[str, str, str]:
        return ("National", self.sport, self.country)


class LeagueTeam(TeamBase):
    type: Literal["League"] = "League"
    city: str = Field(..., min_length=1)
    tournament: str = Field(..., min_length=1)

    @property
    def identity_key(self) -> tuple[str, str, str]:
        return ("League", self.sport, self.city)


Team = Annotated[Union[NationalTeam, LeagueTeam], Field(discriminator="type")]

_TEAM_ADAPTER: TypeAdapter[Union[NationalTeam, LeagueTeam]] = TypeAdapter(Team)


class TeamStanding(BaseModel):
    """One team's finishing position within a league edition."""

    team: str = Field(..., min_length=1)
    position: int = Field(..., ge=1)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class LeagueEdition(Record):
    name: str = Field(..., min_length=1)
    year: int = Field(..., ge=1, le=9999)
    sport: str = Field(..., min_length=1)
    tournament: str = Field(..., min_length=1)
    league_image_url: str = Field(..., min_length=1)
    teams: List[TeamStanding] = Field(default_factory=list)


def _describe(exc: pydantic.ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item not in ("National", "League"))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid record"


def _validate(model: type[BaseModel] | TypeAdapter, payload: dict[str, Any]) -> Any:
    try:
        if isinstance(model, TypeAdapter):
            return model.validate_python(payload)
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc)) from exc


def build_sport(**fields: Any) -> Sport:
    return _validate(Sport, fields)


def build_tournament(**fields: Any) -> Tournament:
    return _validate(Tournament, fields)


def build_team(**fields: Any) -> Union[NationalTeam, LeagueTeam]:
    """Validate a team payload against the variant selected by ``type``.

    Fields that belong to the other variant are dropped, so switching a team
    from League to National discards its city and tournament and the reverse
    discards its country.
    """

    team_type = fields.get("type")
    if team_type not in ("National", "League"):
        raise ValidationError("type: must be 'National' or 'League'")
    payload = dict(fields)
    if team_type == "National":
        payload.pop("city", None)
        payload.pop("tournament", None)
    else:
        payload.pop("country", None)
    return _validate(_TEAM_ADAPTER, payload)


def build_edition(**fields: Any) -> LeagueEdition:
    return _validate(LeagueEdition, fields)


def team_from_dict(payload: dict[str, Any]) -> Union[NationalTeam, LeagueTeam]:
    return _TEAM_ADAPTER.validate_python(payload)
