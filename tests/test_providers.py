import json

import pytest

from builders import game, league, nfl, side
from fantasy_records.errors import DataUnavailableError, MissingDataError
from fantasy_records.models import BYE
from fantasy_records.providers import ConfigProvider, LeagueDataProvider

CONFIG = {
    "name": "Friends",
    "leagues": [
        {
            "name": "Dynasty",
            "league_type": "dynasty",
            "color": "#aa0000",
            "years": [
                {"year": 2022, "league_id": "A"},
                {"year": 2023, "league_id": "B", "final_placements": {"t1": 1, "t2": 2}},
            ],
        }
    ],
    "managers": [{"manager_id": "m1", "name": "Manager 1", "external_ids": ["sleeper-1", "espn-9"]}],
}


def _write_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(CONFIG), encoding="utf-8")
    return path


def test_config_provider_loads_groups_and_managers(tmp_path) -> None:
    provider = ConfigProvider(_write_config(tmp_path))

    config = provider.load()
    assert config.name == "Friends"
    dynasty = provider.group("Dynasty")
    assert dynasty.league_type == "dynasty"
    assert [(y.year, y.league_id) for y in dynasty.years] == [(2022, "A"), (2023, "B")]
    assert dynasty.years[1].final_placements == {"t1": 1, "t2": 2}
    assert provider.resolve_manager("espn-9") == "m1"
    assert provider.resolve_manager("someone-else") == "someone-else"
    assert provider.load() is config


def test_config_provider_errors(tmp_path) -> None:
    with pytest.raises(DataUnavailableError):
        ConfigProvider(tmp_path / "missing.json").load()
    with pytest.raises(MissingDataError):
        ConfigProvider(_write_config(tmp_path)).group("Redraft")


def test_store_and_load_league(tmp_path) -> None:
    season = league(
        [
            game(1, side("t1", 20.0, starters=["qb1", None], player_points={"qb1": 20.0}), side("t2", 18.5)),
            game(2, side("t1", 90.0), BYE),
        ],
        final_placements={"t1": 1, "t2": 2},
    )
    LeagueDataProvider(tmp_path).store_league(season)

    loaded = LeagueDataProvider(tmp_path).load_league("L2023")
    assert loaded == season
    assert loaded.matchup_data.matchups[1].team2 is BYE


@pytest.mark.regression
def test_store_league_keeps_backup_of_previous_file(tmp_path) -> None:
    provider = LeagueDataProvider(tmp_path)
    provider.store_league(league([], year=2022))
    provider.store_league(league([], year=2023))

    backup = tmp_path / "leagues" / "L2023.json.bak"
    assert backup.exists()
    assert json.loads(backup.read_text(encoding="utf-8"))["year"] == 2022


def test_missing_or_malformed_league_raises_with_league_id(tmp_path) -> None:
    provider = LeagueDataProvider(tmp_path)
    with pytest.raises(DataUnavailableError) as missing:
        provider.load_league("nope")
    assert missing.value.league_id == "nope"

    (tmp_path / "leagues").mkdir()
    (tmp_path / "leagues" / "bad.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(DataUnavailableError) as malformed:
        provider.load_league("bad")
    assert malformed.value.league_id == "bad"

    (tmp_path / "leagues" / "partial.json").write_text(json.dumps({"league_id": "partial"}), encoding="utf-8")
    with pytest.raises(DataUnavailableError):
        provider.load_league("partial")


def test_nfl_data_round_trip_and_memoisation(tmp_path) -> None:
    provider = LeagueDataProvider(tmp_path)
    directory = nfl(qb1="QB", rb1="RB")
    provider.store_nfl_data(directory)

    fresh = LeagueDataProvider(tmp_path)
    loaded = fresh.load_nfl_data()
    assert loaded == directory
    assert fresh.load_nfl_data() is loaded


def test_loaded_seasons_use_stable_manager_ids(tmp_path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "name": "Friends",
                "leagues": [],
                "managers": [{"manager_id": "alice", "name": "Alice", "external_ids": ["m1"]}],
            }
        ),
        encoding="utf-8",
    )
    config = ConfigProvider(config_path)
    season = league([game(1, side("t1", 100.0), side("t2", 90.0))])
    LeagueDataProvider(tmp_path / "cache").store_league(season)

    loaded = LeagueDataProvider(tmp_path / "cache", resolve_manager=config.resolve_manager).load_league("L2023")

    assert set(loaded.manager_data.managers) == {"alice", "m2"}
    assert loaded.manager_data.managers["alice"].manager_id == "alice"
    assert loaded.manager_data.managers["alice"].name == "Manager 1"
    assert loaded.manager_data.team_assignments == {"alice": "t1", "m2": "t2"}
    assert loaded.team_data.teams["t1"].manager_id == "alice"
    assert loaded.manager_data.manager_for_team("t1") == "alice"
    assert season.manager_data.manager_for_team("t1") == "m1"


@pytest.mark.regression
def test_two_managers_mapping_to_one_id_is_a_data_error(tmp_path) -> None:
    LeagueDataProvider(tmp_path).store_league(league([]))
    provider = LeagueDataProvider(tmp_path, resolve_manager=lambda external_id: "same")
    with pytest.raises(DataUnavailableError) as collapsed:
        provider.load_league("L2023")
    assert collapsed.value.league_id == "L2023"


def test_config_provider_clear_rereads_the_file(tmp_path) -> None:
    path = _write_config(tmp_path)
    provider = ConfigProvider(path)
    assert provider.load().name == "Friends"

    path.write_text(json.dumps(dict(CONFIG, name="Rivals")), encoding="utf-8")
    assert provider.load().name == "Friends"
    provider.clear()
    assert provider.load().name == "Rivals"
