import pydantic
import pytest

from sportadmin.errors import ValidationError
from sportadmin.models import LeagueTeam, NationalTeam, build_edition, build_sport, build_team


def test_sport_name_is_trimmed_and_record_frozen():
    sport = build_sport(name="  Cricket  ", image_url="https://img.test/c.png")

    assert sport.name == "Cricket"
    assert sport.id

    with pytest.raises((TypeError, pydantic.ValidationError)):
        sport.name = "Hockey"  # type: ignore[misc]


def test_blank_sport_name_rejected():
    with pytest.raises(ValidationError):
        build_sport(name="   ", image_url="https://img.test/c.png")


def test_national_team_requires_country():
    with pytest.raises(ValidationError) as excinfo:
        build_team(name="India", type="National", sport="s1", image_url="u")
    assert "country" in excinfo.value.message


def test_league_team_requires_city_and_tournament():
    with pytest.raises(ValidationError):
        build_team(name="Mumbai Indians", type="League", sport="s1", city="Mumbai", image_url="u")
    with pytest.raises(ValidationError):
        build_team(name="Mumbai Indians", type="League", sport="s1", tournament="t1", image_url="u")


def test_unknown_team_type_rejected():
    with pytest.raises(ValidationError):
        build_team(name="X", type="Club", sport="s1", image_url="u")


def test_team_variant_drops_fields_of_other_type():
    national = build_team(
        name="India",
        type="National",
        sport="s1",
        country="India",
        city="Mumbai",
        tournament="t1",
        image_url="u",
    )
    assert isinstance(national, NationalTeam)
    assert not hasattr(national, "city")

    league = build_team(
        name="Mumbai Indians",
        type="League",
        sport="s1",
        country="India",
        city="Mumbai",
        tournament="t1",
        image_url="u",
    )
    assert isinstance(league, LeagueTeam)
    assert not hasattr(league, "country")
    assert league.identity_key == ("League", "s1", "Mumbai")


def test_edition_accepts_empty_team_list():
    edition = build_edition(
        name="Premier League 2024",
        year=2024,
        sport="s1",
        tournament="t1",
        league_image_url="u",
    )
    assert edition.teams == []


def test_edition_rejects_non_positive_position():
    with pytest.raises(ValidationError):
        build_edition(
            name="Premier League 2024",
            year=2024,
            sport="s1",
            tournament="t1",
            league_image_url="u",
            teams=[{"team": "a", "position": 0}],
        )


@pytest.mark.parametrize("year", [0, -5, 10**20])
def test_edition_year_out_of_range_rejected(year):
    with pytest.raises(ValidationError):
        build_edition(
            name="Premier League",
            year=year,
            sport="s1",
            tournament="t1",
            league_image_url="https://img.test/pl.png",
        )
