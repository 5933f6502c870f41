"""Record builders shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sportadmin.models import build_edition, build_team


BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def add_league_team(store, sport, tournament, name, city, *, inactive=False, minutes=0):
    stamp = BASE_TIME + timedelta(minutes=minutes)
    return store.add_team(
        build_team(
            name=name,
            type="League",
            sport=sport.id,
            city=city,
            tournament=tournament.id,
            inactive=inactive,
            image_url=f"https://img.test/{name.lower().replace(' ', '-')}.png",
            created_at=stamp,
            updated_at=stamp,
        )
    )


def add_edition(store, sport, tournament, year, standings, name=None):
    return store.add_league(
        build_edition(
            name=name or f"{tournament.name} {year}",
            year=year,
            sport=sport.id,
            tournament=tournament.id,
            league_image_url=f"https://img.test/{year}.png",
            teams=standings,
        )
    )


def add_national_team(store, sport, name, country, *, inactive=False, minutes=0):
    stamp = BASE_TIME + timedelta(minutes=minutes)
    return store.add_team(
        build_team(
            name=name,
            type="National",
            sport=sport.id,
            country=country,
            inactive=inactive,
            image_url=f"https://img.test/{name.lower().replace(' ', '-')}.png",
            created_at=stamp,
            updated_at=stamp,
        )
    )
