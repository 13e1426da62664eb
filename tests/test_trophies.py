import pytest

from builders import by_id, game, group, league, nfl, side
from fantasy_records.errors import MissingDataError
from fantasy_records.models import BYE, NFLData, LeagueYear, TrophyType
from fantasy_records.trophies import compute_trophies


def _of_type(trophies, trophy_type):
    return [t for t in trophies if t.trophy_type is trophy_type]


def test_season_aggregates_and_notes() -> None:
    season = league(
        [
            game(1, side("t1", 150.0), side("t2", 100.0)),
            game(2, side("t2", 120.0), side("t1", 118.0)),
        ]
    )
    result = compute_trophies(group(season), by_id(season), NFLData())

    assert [t.trophy_type for t in result.trophies] == [
        TrophyType.SEASON_HIGH_SCORE,
        TrophyType.SEASON_NARROWEST_WIN,
        TrophyType.SEASON_LARGEST_BLOWOUT,
        TrophyType.SEASON_POINTS_FOR,
        TrophyType.SEASON_POINTS_AGAINST,
    ]
    high, narrow, blowout, points_for, points_against = result.trophies
    assert (high.manager_id, high.week, high.note) == ("m1", 1, "150.00pts (150.00-100.00 against m2)")
    assert (narrow.manager_id, narrow.week, narrow.note) == ("m2", 2, "2.00pts (120.00-118.00 against m1)")
    assert blowout.manager_id == "m1"
    assert (points_for.manager_id, points_for.note) == ("m1", "268.00pts")
    assert (points_against.manager_id, points_against.note) == ("m1", "220.00pts")
    assert result.data_available_from_year == 2023


def test_threshold_trophies_follow_league_type() -> None:
    redraft = league([game(1, side("t1", 195.0), side("t2", 60.0))])
    trophies = compute_trophies(group(redraft), by_id(redraft), NFLData()).trophies

    (high,) = _of_type(trophies, TrophyType.OVERALL_HIGH_SCORE)
    (low,) = _of_type(trophies, TrophyType.OVERALL_LOW_SCORE)
    assert high.manager_id == "m1"
    assert low.manager_id == "m2"
    assert low.note == "60.00pts (195.00-60.00 against m1)"

    dynasty = league([game(1, side("t1", 195.0), side("t2", 60.0))], league_type="dynasty")
    trophies = compute_trophies(group(dynasty), by_id(dynasty), NFLData()).trophies
    assert _of_type(trophies, TrophyType.OVERALL_HIGH_SCORE) == []
    assert len(_of_type(trophies, TrophyType.OVERALL_LOW_SCORE)) == 1


def test_season_high_score_is_tie_inclusive() -> None:
    season = league(
        [
            game(1, side("t1", 150.0), side("t2", 100.0)),
            game(2, side("t2", 150.0), side("t1", 90.0)),
        ]
    )
    trophies = compute_trophies(group(season), by_id(season), NFLData()).trophies
    highs = _of_type(trophies, TrophyType.SEASON_HIGH_SCORE)
    assert [(t.manager_id, t.week) for t in highs] == [("m1", 1), ("m2", 2)]


def test_placements_award_podium_and_last_place() -> None:
    season = league([], teams=4, final_placements={"t1": 2, "t2": 1, "t3": 3, "t4": 4})
    result = compute_trophies(group(season), by_id(season), NFLData())

    assert [(t.manager_id, t.placement) for t in result.trophies] == [
        ("m2", 1),
        ("m1", 2),
        ("m3", 3),
        ("m4", 4),
    ]
    assert result.data_available_from_year == 2023


def test_group_placements_override_season_placements() -> None:
    season = league([], final_placements={"t1": 1, "t2": 2})
    definition = group(season)
    definition.years[0] = LeagueYear(year=2023, league_id="L2023", final_placements={"t1": 2, "t2": 1})
    trophies = compute_trophies(definition, by_id(season), NFLData()).trophies
    assert [(t.manager_id, t.placement) for t in trophies][0] == ("m2", 1)


def test_lineup_iq_trophies() -> None:
    players = nfl(qb1="QB", qb2="QB", qb3="QB", qb4="QB")
    season = league(
        [
            game(
                1,
                side("t1", 20.0, starters=["qb1"], bench=["qb2"], player_points={"qb1": 20.0, "qb2": 10.0}),
                side("t2", 10.0, starters=["qb3"], bench=["qb4"], player_points={"qb3": 10.0, "qb4": 20.0}),
            )
        ],
        roster_positions=["QB"],
    )
    trophies = compute_trophies(group(season), by_id(season), players).trophies

    (perfect,) = _of_type(trophies, TrophyType.OVERALL_HIGH_IQ)
    assert (perfect.manager_id, perfect.week, perfect.note) == ("m1", 1, "IQ: 100.00%")
    (season_best,) = _of_type(trophies, TrophyType.SEASON_HIGH_IQ)
    assert (season_best.manager_id, season_best.week, season_best.note) == ("m1", 1, "IQ: 100.00%")


def test_season_high_iq_ties_go_to_most_frequent_manager() -> None:
    players = nfl(qb1="QB", qb2="QB")

    def perfect(team: str, points: float):
        return side(team, points, starters=["qb1"], player_points={"qb1": points})

    season = league(
        [
            game(1, perfect("t1", 20.0), perfect("t2", 18.0)),
            game(2, perfect("t1", 22.0), side("t2", 5.0, starters=["qb2"], bench=["qb1"], player_points={"qb1": 9.0})),
        ],
        roster_positions=["QB"],
    )
    trophies = compute_trophies(group(season), by_id(season), players).trophies

    (season_best,) = _of_type(trophies, TrophyType.SEASON_HIGH_IQ)
    assert season_best.manager_id == "m1"
    assert season_best.week is None
    assert season_best.note == "IQ: 100.00% x2"


def test_zero_potential_sides_are_skipped() -> None:
    players = nfl(qb1="QB", qb2="QB")
    season = league(
        [
            game(
                1,
                side("t1", 0.0, starters=["qb1"], player_points={}),
                side("t2", 0.0, starters=["qb2"], player_points={}),
            )
        ],
        roster_positions=["QB"],
    )
    trophies = compute_trophies(group(season), by_id(season), players).trophies
    assert _of_type(trophies, TrophyType.OVERALL_HIGH_IQ) == []
    assert _of_type(trophies, TrophyType.SEASON_HIGH_IQ) == []


def test_byes_only_season_contributes_nothing() -> None:
    season = league([game(1, side("t1", 100.0), BYE)])
    result = compute_trophies(group(season), by_id(season), NFLData())
    assert result.trophies == []
    assert result.data_available_from_year is None


def test_unknown_league_type_raises() -> None:
    season = league([game(1, side("t1", 100.0), side("t2", 90.0))], league_type="keeper")
    with pytest.raises(MissingDataError):
        compute_trophies(group(season), by_id(season), NFLData())
