"""Lightweight REST client for the sportadmin API."""

from __future__ import annotations

import argparse
import json

import httpx


API_PREFIX = "/api/v1"


def _print_payload(resp: httpx.Response, label: str) -> None:
    if resp.status_code == 404:
        raise SystemExit(f"{label} not found")
    body = resp.json()
    if not body.get("success", False):
        raise SystemExit(f"{label}: {body.get('message', 'request failed')}")
    print(json.dumps(body.get("data"), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the sportadmin REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--list-sports", action="store_true", help="List sports and exit")
    parser.add_argument("--list-tournaments", metavar="SPORT_ID", help="List tournaments of a sport")
    parser.add_argument("--tournament", metavar="TOURNAMENT_ID", help="Tournament id used with --editions")
    parser.add_argument("--editions", metavar="SPORT_ID", help="List editions of --tournament within a sport")
    parser.add_argument("--history", metavar="TEAM_ID", help="Fetch the lineage history of a team")
    args = parser.parse_args()

    if args.editions and not args.tournament:
        raise SystemExit("--editions requires --tournament")

    with httpx.Client(base_url=args.base_url) as client:
        if args.list_sports:
            _print_payload(client.get(f"{API_PREFIX}/getSport"), "sports")
        if args.list_tournaments:
            resp = client.get(f"{API_PREFIX}/getTournament", params={"sport": args.list_tournaments})
            _print_payload(resp, "tournaments")
        if args.editions:
            resp = client.get(
                f"{API_PREFIX}/getLeague",
                params={"sport": args.editions, "tournament": args.tournament},
            )
            _print_payload(resp, "editions")
        if args.history:
            resp = client.get(f"{API_PREFIX}/getTeamHistory/{args.history}")
            _print_payload(resp, f"team {args.history}")


if __name__ == "__main__":
    main()
