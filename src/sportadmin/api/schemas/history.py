from __future__ import annotations

from typing import List, Union

from pydantic import BaseModel

from sportadmin.models import LeagueTeam, NationalTeam
from sportadmin.standings import PopulatedEdition


class TeamHistoryResponse(BaseModel):
    team: Union[NationalTeam, LeagueTeam]
    current: Union[NationalTeam, LeagueTeam]
    members: List[Union[NationalTeam, LeagueTeam]]
    won: List[PopulatedEdition]
    runner_up: List[PopulatedEdition]
    titles: int
    runner_up_count: int
