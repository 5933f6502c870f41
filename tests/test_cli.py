import csv
import json

from sportadmin.cli import main
from sportadmin.models import TeamStanding

from tests.factories import add_edition, add_league_team


def test_history_prints_lineage(store, cricket, tmp_path, capsys):
    sport, league = cricket
    old = add_league_team(store, sport, league, "Bombay Blues", "Mumbai", inactive=True)
    new = add_league_team(store, sport, league, "Mumbai Indians", "Mumbai", minutes=5)
    add_edition(store, sport, league, 2023, [TeamStanding(team=old.id, position=1), TeamStanding(team=new.id, position=2)])

    code = main(["--db", str(tmp_path / "taxonomy.sqlite"), "history", old.id])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["team"] == "Bombay Blues"
    assert payload["current"] == "Mumbai Indians"
    assert [member["id"] for member in payload["members"]] == [old.id, new.id]
    assert [edition["year"] for edition in payload["won"]] == [2023]
    assert [edition["year"] for edition in payload["runner_up"]] == [2023]


def test_history_of_unknown_team_fails(store, tmp_path, capsys):
    code = main(["--db", str(tmp_path / "taxonomy.sqlite"), "history", "missing"])

    assert code == 1
    assert capsys.readouterr().out.startswith("error:")


def test_editions_writes_standings_csv(store, cricket, tmp_path, capsys):
    sport, league = cricket
    club = add_league_team(store, sport, league, "Mumbai Indians", "Mumbai")
    rival = add_league_team(store, sport, league, "Chennai Kings", "Chennai")
    add_edition(store, sport, league, 2024, [TeamStanding(team=rival.id, position=1)])
    add_edition(store, sport, league, 2022, [TeamStanding(team=club.id, position=1), TeamStanding(team=rival.id, position=2)])
    output = tmp_path / "standings.csv"

    code = main([
        "--db",
        str(tmp_path / "taxonomy.sqlite"),
        "editions",
        "--sport",
        sport.id,
        "--tournament",
        league.id,
        "--output",
        str(output),
    ])

    assert code == 0
    assert "Wrote standings" in capsys.readouterr().out
    with output.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [(row["year"], row["position"], row["team"]) for row in rows] == [
        ("2022", "1", "Mumbai Indians"),
        ("2022", "2", "Chennai Kings"),
        ("2024", "1", "Chennai Kings"),
    ]
