import json

import pytest

from builders import game, league, nfl, side
from fantasy_records.app import build_reports, report_to_dict
from fantasy_records.errors import DataUnavailableError
from fantasy_records.models import LeagueConfig, LeagueDefinition, LeagueYear
from fantasy_records.providers import LeagueDataProvider


def _config(*league_ids: str) -> LeagueConfig:
    return LeagueConfig(
        name="Friends",
        leagues=[
            LeagueDefinition(
                name="Dynasty",
                league_type="redraft",
                years=[LeagueYear(year=2020 + i, league_id=league_id) for i, league_id in enumerate(league_ids)],
            )
        ],
    )


def test_build_reports_for_every_group(tmp_path) -> None:
    provider = LeagueDataProvider(tmp_path)
    provider.store_league(league([game(1, side("t1", 120.5), side("t2", 99.25))]))
    provider.store_nfl_data(nfl())

    reports = build_reports(_config("L2023"), provider)

    report = reports["Dynasty"]
    assert report.manager_matchups.data["m1"]["m2"].wins == 1
    payload = report_to_dict(report)
    assert payload["group"]["name"] == "Dynasty"
    assert payload["records"][0]["type"] == "category"
    assert payload["records"][0]["children"][0]["type"] == "record"
    json.dumps(payload)


def test_build_reports_propagates_missing_seasons(tmp_path) -> None:
    provider = LeagueDataProvider(tmp_path)
    provider.store_nfl_data(nfl())
    with pytest.raises(DataUnavailableError):
        build_reports(_config("gone"), provider)
