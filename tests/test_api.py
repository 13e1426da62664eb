import json

import pytest
from fastapi.testclient import TestClient

from builders import game, league, nfl, side
from fantasy_records import api
from fantasy_records.providers import LeagueDataProvider


@pytest.fixture
def client(tmp_path, monkeypatch) -> TestClient:
    config = {
        "name": "Friends",
        "leagues": [{"name": "Dynasty", "league_type": "redraft", "years": [{"year": 2023, "league_id": "L2023"}]}],
        "managers": [],
    }
    (tmp_path / "config.json").write_text(json.dumps(config), encoding="utf-8")
    provider = LeagueDataProvider(tmp_path / "cache")
    provider.store_league(league([game(1, side("t1", 120.5), side("t2", 99.25))], playoff_week_start=2))
    provider.store_nfl_data(nfl(qb1="QB"))

    monkeypatch.setattr(api, "service", api.RecordBookService(tmp_path))
    return TestClient(api.app)


def test_health(client) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_config_league_and_nfl(client) -> None:
    assert client.get("/api/config").json()["name"] == "Friends"
    assert client.get("/api/leagues/L2023").json()["year"] == 2023
    assert "qb1" in client.get("/api/nfl").json()["players"]
    assert client.get("/api/leagues/missing").status_code == 404


def test_group_records_and_query(client) -> None:
    categories = client.get("/api/groups/Dynasty/records").json()["records"]
    assert len(categories) == 6
    assert categories[0]["children"][0]["name"] == "Highest score"

    response = client.post("/api/groups/Dynasty/records/query", json={"record": "Highest score"})
    assert response.status_code == 200
    page = response.json()
    assert page["total_entries"] == 2
    assert page["total_pages"] == 1
    assert page["rows"][0]["position"] == 1
    assert page["rows"][0]["cells"]["scores"] == "120.50 - 99.25 (Δ 21.25)"
    assert page["rows"][0]["cells"]["team"] == "Team 1 (Manager 1)"


def test_query_errors(client) -> None:
    url = "/api/groups/Dynasty/records/query"
    assert client.post(url, json={"record": "Most trades"}).status_code == 404
    assert client.post(url, json={"record": "Highest score", "scope": "preseason"}).status_code == 400
    assert client.post(url, json={"record": "Highest score", "page_size": 7}).status_code == 400
    assert client.get("/api/groups/Redraft/records").status_code == 404


def test_matchups_and_trophies(client) -> None:
    matrix = client.get("/api/groups/Dynasty/manager-matchups").json()
    assert matrix["data_available_from_year"] == 2023
    assert matrix["data"]["m1"]["m2"] == {"wins": 1, "count": 1}
    assert matrix["data"]["m2"]["MEDIAN"] == {"wins": 0, "count": 1}

    trophies = client.get("/api/groups/Dynasty/trophies").json()["trophies"]
    assert trophies[0]["trophy_type"] == "season-high-score"
    assert trophies[0]["manager_id"] == "m1"


def test_reload_drops_cached_reports(client) -> None:
    client.get("/api/groups/Dynasty/trophies")
    assert client.post("/api/reload").json() == {"ok": True, "dropped_reports": 1}


def test_single_season_group_has_no_years_in_league_record(client) -> None:
    categories = client.get("/api/groups/Dynasty/records").json()["records"]
    standings = next(c for c in categories if c["name"] == "Career Standings")
    assert "Most years in league (YiL)" not in [r["name"] for r in standings["children"]]

    response = client.post("/api/groups/Dynasty/records/query", json={"record": "Most years in league (YiL)"})
    assert response.status_code == 404


def test_config_manager_ids_replace_upstream_ids(tmp_path, monkeypatch) -> None:
    config = {
        "name": "Friends",
        "leagues": [{"name": "Dynasty", "league_type": "redraft", "years": [{"year": 2023, "league_id": "L2023"}]}],
        "managers": [{"manager_id": "alice", "name": "Alice", "external_ids": ["m1"]}],
    }
    (tmp_path / "config.json").write_text(json.dumps(config), encoding="utf-8")
    LeagueDataProvider(tmp_path / "cache").store_league(league([game(1, side("t1", 120.5), side("t2", 99.25))]))
    LeagueDataProvider(tmp_path / "cache").store_nfl_data(nfl(qb1="QB"))
    monkeypatch.setattr(api, "service", api.RecordBookService(tmp_path))
    client = TestClient(api.app)

    matrix = client.get("/api/groups/Dynasty/manager-matchups").json()["data"]
    assert set(matrix) == {"alice", "m2"}
    assert matrix["alice"]["m2"] == {"wins": 1, "count": 1}
