from builders import game, group, league, side
from fantasy_records.models import BYE, TBD
from fantasy_records.schedule import group_managers, matchup_scope, median, weekly_medians


def test_median_of_even_and_odd_counts() -> None:
    assert median([110.0, 80.0, 100.0, 90.0]) == 95.0
    assert median([3.0, 1.0, 2.0]) == 2.0
    assert median([]) is None


def test_weekly_medians_ignore_byes_and_unplayed_weeks() -> None:
    season = league(
        [
            game(1, side("t1", 80.0), side("t2", 110.0)),
            game(1, side("t3", 90.0), side("t4", 100.0)),
            game(2, side("t1", 70.0), BYE),
            game(3, side("t1", 70.0), TBD),
        ],
        teams=4,
    )
    assert weekly_medians(season) == {1: 95.0}


def test_matchup_scope() -> None:
    season = league([], playoff_week_start=15, playoff_teams=["t1"])
    assert matchup_scope(season, 14, "t1") == "in-season"
    assert matchup_scope(season, 15, "t1") == "playoffs"
    assert matchup_scope(season, 16, "t2") == "toilet-bowl"


def test_group_managers_first_seen_order() -> None:
    first = league([], league_id="A", year=2021, teams=2)
    second = league([], league_id="B", year=2022, teams=3)
    managers = group_managers(group(first, second), {"A": first, "B": second})
    assert [m.manager_id for m in managers] == ["m1", "m2", "m3"]
