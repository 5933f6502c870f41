"""Persistence layer for the sports taxonomy collections."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional, Union

from sportadmin.errors import NotFoundError, ValidationError
from sportadmin.models import (
    LeagueEdition,
    LeagueTeam,
    NationalTeam,
    Sport,
    TeamStanding,
    Tournament,
    team_from_dict,
)


logger = logging.getLogger(__name__)

AnyTeam = Union[NationalTeam, LeagueTeam]


class TaxonomyStore:
    """SQLite-backed store for sports, tournaments, teams and league editions.

    References between collections are plain ids. Nothing cascades on delete,
    so readers must tolerate ids that no longer resolve.
    """

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        if isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path: Path | str = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS sports (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL UNIQUE,
                image_url TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS tournaments (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                sport TEXT NOT NULL,
                type TEXT NOT NULL,
                image_url TEXT NOT NULL,
                priority REAL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS teams (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                image_url TEXT NOT NULL,
                sport TEXT NOT NULL,
                type TEXT NOT NULL,
                country TEXT,
                city TEXT,
                tournament TEXT,
                inactive INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS leagues (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                year INTEGER NOT NULL,
                sport TEXT NOT NULL,
                tournament TEXT NOT NULL,
                league_image_url TEXT NOT NULL,
                teams_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_teams_city ON teams (sport, city)")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_teams_country ON teams (sport, country)")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_leagues_pair ON leagues (sport, tournament)")

    # generic helpers

    def _insert(self, table: str, values: Mapping[str, Any]) -> None:
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                tuple(values.values()),
            )
        logger.info("Inserted %s %s", table, values["id"])

    def _replace(self, table: str, label: str, values: Mapping[str, Any]) -> None:
        record_id = values["id"]
        assignments = ", ".join(f"{column} = ?" for column in values if column not in ("id", "created_at"))
        params = [value for column, value in values.items() if column not in ("id", "created_at")]
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                (*params, record_id),
            )
        if cursor.rowcount == 0:
            raise NotFoundError(f"{label} not found")
        logger.info("Updated %s %s", table, record_id)

    def _delete(self, table: str, label: str, record_id: str) -> None:
        with self._connect() as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
        if cursor.rowcount == 0:
            raise NotFoundError(f"{label} not found")
        logger.info("Deleted %s %s", table, record_id)

    def _fetch_one(self, table: str, record_id: Optional[str]) -> Optional[sqlite3.Row]:
        if not record_id:
            return None
        with self._connect() as conn:
            return conn.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,)).fetchone()

    def _select(
        self,
        table: str,
        filters: Mapping[str, Any],
        order_by: str,
    ) -> List[sqlite3.Row]:
        query = f"SELECT * FROM {table}"
        conditions: list[str] = []
        params: list[Any] = []
        for column, value in filters.items():
            if value is None:
                continue
            conditions.append(f"{column} = ?")
            params.append(value)
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += f" ORDER BY {order_by}"
        with self._connect() as conn:
            return conn.execute(query, tuple(params)).fetchall()

    # sports

    def add_sport(self, sport: Sport) -> Sport:
        try:
            self._insert("sports", self._sport_values(sport))
        except sqlite3.IntegrityError as exc:
            raise ValidationError(f"Sport '{sport.name}' already exists") from exc
        return sport

    def replace_sport(self, sport: Sport) -> Sport:
        try:
            self._replace("sports", "Sport", self._sport_values(sport))
        except sqlite3.IntegrityError as exc:
            raise ValidationError(f"Sport '{sport.name}' already exists") from exc
        return sport

    def get_sport(self, sport_id: Optional[str]) -> Optional[Sport]:
        row = self._fetch_one("sports", sport_id)
        return self._row_to_sport(row) if row is not None else None

    def list_sports(self) -> List[Sport]:
        rows = self._select("sports", {}, "name COLLATE NOCASE, created_at")
        return [self._row_to_sport(row) for row in rows]

    def delete_sport(self, sport_id: str) -> None:
        self._delete("sports", "Sport", sport_id)

    # tournaments

    def add_tournament(self, tournament: Tournament) -> Tournament:
        self._insert("tournaments", self._tournament_values(tournament))
        return tournament

    def replace_tournament(self, tournament: Tournament) -> Tournament:
        self._replace("tournaments", "Tournament", self._tournament_values(tournament))
        return tournament

    def get_tournament(self, tournament_id: Optional[str]) -> Optional[Tournament]:
        row = self._fetch_one("tournaments", tournament_id)
        return self._row_to_tournament(row) if row is not None else None

    def list_tournaments(
        self,
        *,
        sport: str | None = None,
        type: str | None = None,
    ) -> List[Tournament]:
        rows = self._select(
            "tournaments",
            {"sport": sport, "type": type},
            "priority IS NULL, priority, name COLLATE NOCASE",
        )
        return [self._row_to_tournament(row) for row in rows]

    def delete_tournament(self, tournament_id: str) -> None:
        self._delete("tournaments", "Tournament", tournament_id)

    # teams

    def add_team(self, team: AnyTeam) -> AnyTeam:
        self._insert("teams", self._team_values(team))
        return team

    def replace_team(self, team: AnyTeam) -> AnyTeam:
        self._replace("teams", "Team", self._team_values(team))
        return team

    def get_team(self, team_id: Optional[str]) -> Optional[AnyTeam]:
        row = self._fetch_one("teams", team_id)
        return self._row_to_team(row) if row is not None else None

    def list_teams(
        self,
        *,
        sport: str | None = None,
        tournament: str | None = None,
        type: str | None = None,
        city: str | None = None,
        country: str | None = None,
        inactive: bool | None = None,
    ) -> List[AnyTeam]:
        filters: dict[str, Any] = {
            "sport": sport,
            "tournament": tournament,
            "type": type,
            "city": city,
            "country": country,
            "inactive": None if inactive is None else int(inactive),
        }
        rows = self._select("teams", filters, "created_at, rowid")
        return [self._row_to_team(row) for row in rows]

    def delete_team(self, team_id: str) -> None:
        self._delete("teams", "Team", team_id)

    # league editions

    def add_league(self, edition: LeagueEdition) -> LeagueEdition:
        self._insert("leagues", self._league_values(edition))
        return edition

    def replace_league(self, edition: LeagueEdition) -> LeagueEdition:
        self._replace("leagues", "League", self._league_values(edition))
        return edition

    def get_league(self, league_id: Optional[str]) -> Optional[LeagueEdition]:
        row = self._fetch_one("leagues", league_id)
        return self._row_to_league(row) if row is not None else None

    def list_leagues(
        self,
        *,
        sport: str | None = None,
        tournament: str | None = None,
        team: str | None = None,
    ) -> List[LeagueEdition]:
        query = "SELECT * FROM leagues"
        conditions: list[str] = []
        params: list[str] = []
        if sport:
            conditions.append("sport = ?")
            params.append(sport)
        if tournament:
            conditions.append("tournament = ?")
            params.append(tournament)
        if team:
            conditions.append(
                "EXISTS (SELECT 1 FROM json_each(leagues.teams_json) AS entry "
                "WHERE json_extract(entry.value, '$.team') = ?)"
            )
            params.append(team)
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY year, created_at, rowid"
        with self._connect() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_league(row) for row in rows]

    def delete_league(self, league_id: str) -> None:
        self._delete("leagues", "League", league_id)

    # row mapping

    @staticmethod
    def _timestamps(record: Sport | Tournament | AnyTeam | LeagueEdition) -> dict[str, str]:
        return {
            "created_at": record.created_at.isoformat(),
            "updated_at": record.updated_at.isoformat(),
        }

    def _sport_values(self, sport: Sport) -> dict[str, Any]:
        return {
            "id": sport.id,
            "name": sport.name,
            "image_url": sport.image_url,
            **self._timestamps(sport),
        }

    def _tournament_values(self, tournament: Tournament) -> dict[str, Any]:
        return {
            "id": tournament.id,
            "name": tournament.name,
            "sport": tournament.sport,
            "type": tournament.type,
            "image_url": tournament.image_url,
            "priority": tournament.priority,
            **self._timestamps(tournament),
        }

    def _team_values(self, team: AnyTeam) -> dict[str, Any]:
        return {
            "id": team.id,
            "name": team.name,
            "image_url": team.image_url,
            "sport": team.sport,
            "type": team.type,
            "country": team.country if isinstance(team, NationalTeam) else None,
            "city": team.city if isinstance(team, LeagueTeam) else None,
            "tournament": team.tournament if isinstance(team, LeagueTeam) else None,
            "inactive": int(team.inactive),
            **self._timestamps(team),
        }

    def _league_values(self, edition: LeagueEdition) -> dict[str, Any]:
        return {
            "id": edition.id,
            "name": edition.name,
            "year": edition.year,
            "sport": edition.sport,
            "tournament": edition.tournament,
            "league_image_url": edition.league_image_url,
            "teams_json": json.dumps([standing.model_dump() for standing in edition.teams]),
            **self._timestamps(edition),
        }

    def _row_to_sport(self, row: sqlite3.Row) -> Sport:
        return Sport(
            id=row["id"],
            name=row["name"],
            image_url=row["image_url"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_tournament(self, row: sqlite3.Row) -> Tournament:
        return Tournament(
            id=row["id"],
            name=row["name"],
            sport=row["sport"],
            type=row["type"],
            image_url=row["image_url"],
            priority=row["priority"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_team(self, row: sqlite3.Row) -> AnyTeam:
        payload: dict[str, Any] = {
            "id": row["id"],
            "name": row["name"],
            "image_url": row["image_url"],
            "sport": row["sport"],
            "type": row["type"],
            "inactive": bool(row["inactive"]),
            "created_at": datetime.fromisoformat(row["created_at"]),
            "updated_at": datetime.fromisoformat(row["updated_at"]),
        }
        if row["type"] == "National":
            payload["country"] = row["country"]
        else:
            payload["city"] = row["city"]
            payload["tournament"] = row["tournament"]
        return team_from_dict(payload)

    def _row_to_league(self, row: sqlite3.Row) -> LeagueEdition:
        return LeagueEdition(
            id=row["id"],
            name=row["name"],
            year=row["year"],
            sport=row["sport"],
            tournament=row["tournament"],
            league_image_url=row["league_image_url"],
            teams=[TeamStanding(**entry) for entry in json.loads(row["teams_json"])],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
