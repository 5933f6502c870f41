from __future__ import annotations

import pytest

from sportadmin.models import build_sport, build_tournament
from sportadmin.persistence import TaxonomyStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store(tmp_path) -> TaxonomyStore:
    return TaxonomyStore(tmp_path / "taxonomy.sqlite")


@pytest.fixture
def cricket(store: TaxonomyStore):
    sport = store.add_sport(build_sport(name="Cricket", image_url="https://img.test/cricket.png"))
    league = store.add_tournament(
        build_tournament(
            name="Premier League",
            sport=sport.id,
            type="League",
            image_url="https://img.test/pl.png",
        )
    )
    return sport, league
