"""Command-line interface for running and inspecting the taxonomy admin."""

from __future__ import annotations

import argparse
import csv
import json
import os
from pathlib import Path
from typing import Sequence

from sportadmin.config_loader import get_config, setup_logging
from sportadmin.errors import SportAdminError
from sportadmin.lineage import populate_history, team_history
from sportadmin.persistence import TaxonomyStore
from sportadmin.standings import PopulatedEdition, list_by_tournament


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sports taxonomy administration")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path (defaults to SPORTADMIN_DB_PATH)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the REST API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    history = sub.add_parser("history", help="Print a team's lineage with won and runner-up editions")
    history.add_argument("team_id", help="Any team id of the lineage")

    editions = sub.add_parser("editions", help="Print the editions of a tournament, oldest first")
    editions.add_argument("--sport", required=True, help="Sport id")
    editions.add_argument("--tournament", required=True, help="Tournament id")
    editions.add_argument("--output", type=Path, default=None, help="Optional CSV path for the standings")
    return parser.parse_args(argv)


def _open_store(db: Path | None) -> TaxonomyStore:
    return TaxonomyStore(db if db is not None else get_config().db_path)


def _edition_summary(edition: PopulatedEdition) -> dict:
    return {
        "id": edition.id,
        "name": edition.name,
        "year": edition.year,
        "tournament": edition.tournament.name if edition.tournament else None,
        "standings": [
            {
                "position": standing.position,
                "team_id": standing.team_id,
                "team": standing.team.name if standing.team else None,
            }
            for standing in edition.teams
        ],
    }


def _write_standings_csv(path: Path, editions: Sequence[PopulatedEdition]) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["year", "edition", "position", "team_id", "team"])
        for edition in editions:
            for standing in edition.teams:
                writer.writerow([
                    edition.year,
                    edition.name,
                    standing.position,
                    standing.team_id,
                    standing.team.name if standing.team else "",
                ])


def _serve(args: argparse.Namespace) -> None:
    import uvicorn

    if args.db is not None:
        # the factory runs in uvicorn and reads its settings from the environment
        os.environ["SPORTADMIN_DB_PATH"] = str(args.db)
        get_config.cache_clear()
    config = get_config()
    setup_logging(config.log_level)
    uvicorn.run(
        "sportadmin.api:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=config.log_level.lower(),
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.command == "serve":
        _serve(args)
        return 0

    store = _open_store(args.db)
    try:
        if args.command == "history":
            history = team_history(store, args.team_id)
            won, runner_up = populate_history(store, history)
            lineage = history.lineage
            payload = {
                "team": lineage.team.name,
                "current": lineage.current.name,
                "members": [
                    {"id": member.id, "name": member.name, "inactive": member.inactive}
                    for member in lineage.members
                ],
                "won": [_edition_summary(edition) for edition in won],
                "runner_up": [_edition_summary(edition) for edition in runner_up],
            }
            print(json.dumps(payload, indent=2))
        elif args.command == "editions":
            editions = list_by_tournament(store, args.sport, args.tournament)
            print(json.dumps([_edition_summary(edition) for edition in editions], indent=2))
            if args.output:
                _write_standings_csv(args.output, editions)
                print(f"Wrote standings to {args.output}")
    except SportAdminError as exc:
        print(f"error: {exc.message}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
