from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass

from .config import (
    BENCHWARMER_THRESHOLDS,
    HIGH_SCORER_THRESHOLDS,
    IQ_TIE_EPSILON,
    PERFECT_LINEUP_THRESHOLD,
)
from .errors import MissingDataError
from .models import League, LeagueDefinition, NFLData, Trophy, TrophyData, TrophyType
from .positions import potential_score
from .schedule import earliest_year, group_managers, matchups_by_week

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MatchupScore:
    week: int
    winner_id: str
    winner_score: float
    loser_id: str
    loser_score: float
    margin: float

    def note(self, headline: float) -> str:
        return (
            f"{headline:.2f}pts ({self.winner_score:.2f}-{self.loser_score:.2f} "
            f"against {self.loser_id})"
        )


@dataclass(slots=True)
class LineupIQSample:
    week: int
    manager_id: str
    realized_score: float
    potential_score: float
    lineup_iq: float


def _threshold(thresholds: dict[str, float], league: League) -> float:
    try:
        return thresholds[league.league_type]
    except KeyError:
        raise MissingDataError(f"No trophy threshold for league type {league.league_type}") from None


def _placement_trophies(league: League, placements: dict[str, int]) -> list[Trophy]:
    ordered = sorted(placements.items(), key=lambda item: item[1])
    if not ordered:
        return []
    managers_by_team = league.manager_data.teams_to_managers()

    def _trophy(team_id: str, placement: int) -> Trophy:
        if team_id not in managers_by_team:
            raise MissingDataError(f"Placement for unassigned team {team_id} in {league.league_id}")
        return Trophy(
            trophy_type=TrophyType.PLACEMENT,
            year=league.year,
            manager_id=managers_by_team[team_id],
            placement=placement,
        )

    # Podium plus last place; a league of three or fewer repeats its last finisher.
    return [_trophy(team_id, placement) for team_id, placement in ordered[:3]] + [_trophy(*ordered[-1])]


def _season_high_iq(league: League, samples: list[LineupIQSample]) -> list[Trophy]:
    if not samples:
        return []
    best = max(sample.lineup_iq for sample in samples)
    leaders = [sample for sample in samples if abs(sample.lineup_iq - best) < IQ_TIE_EPSILON]
    if len(leaders) == 1:
        leader = leaders[0]
        return [
            Trophy(
                trophy_type=TrophyType.SEASON_HIGH_IQ,
                year=league.year,
                manager_id=leader.manager_id,
                week=leader.week,
                note=f"IQ: {leader.lineup_iq * 100:.2f}%",
            )
        ]

    counts = Counter(sample.manager_id for sample in leaders)
    top_count = max(counts.values())
    return [
        Trophy(
            trophy_type=TrophyType.SEASON_HIGH_IQ,
            year=league.year,
            manager_id=manager_id,
            note=f"IQ: {best * 100:.2f}% x{top_count}",
        )
        for manager_id, count in counts.items()
        if count == top_count
    ]


def _season_score_trophies(league: League, scores: list[MatchupScore]) -> list[Trophy]:
    if not scores:
        return []
    trophies: list[Trophy] = []

    high = max(s.winner_score for s in scores)
    narrowest = min(s.margin for s in scores)
    widest = max(s.margin for s in scores)
    for trophy_type, selected, headline in (
        (TrophyType.SEASON_HIGH_SCORE, [s for s in scores if s.winner_score == high], high),
        (TrophyType.SEASON_NARROWEST_WIN, [s for s in scores if s.margin == narrowest], narrowest),
        (TrophyType.SEASON_LARGEST_BLOWOUT, [s for s in scores if s.margin == widest], widest),
    ):
        for score in selected:
            trophies.append(
                Trophy(
                    trophy_type=trophy_type,
                    year=league.year,
                    manager_id=score.winner_id,
                    week=score.week,
                    note=score.note(headline),
                )
            )
    return trophies


def _season_total_trophies(
    league: League,
    points_for: dict[str, float],
    points_against: dict[str, float],
) -> list[Trophy]:
    trophies: list[Trophy] = []
    best_for = max(points_for.values(), default=0.0)
    for manager_id, points in points_for.items():
        if points == best_for:
            trophies.append(
                Trophy(
                    trophy_type=TrophyType.SEASON_POINTS_FOR,
                    year=league.year,
                    manager_id=manager_id,
                    note=f"{best_for:.2f}pts",
                )
            )

    recorded_against = [points for points in points_against.values() if points > 0]
    if recorded_against:
        least_against = min(recorded_against)
        for manager_id, points in points_against.items():
            if points == least_against:
                trophies.append(
                    Trophy(
                        trophy_type=TrophyType.SEASON_POINTS_AGAINST,
                        year=league.year,
                        manager_id=manager_id,
                        note=f"{least_against:.2f}pts",
                    )
                )
    return trophies


def _season_trophies(
    league: League,
    placements: dict[str, int] | None,
    manager_ids: list[str],
    nfl_data: NFLData,
) -> tuple[list[Trophy], bool]:
    """Trophies for one season and whether the season contributed any data."""
    trophies: list[Trophy] = []
    points_for = {manager_id: 0.0 for manager_id in manager_ids}
    points_against = {manager_id: 0.0 for manager_id in manager_ids}
    scores: list[MatchupScore] = []
    samples: list[LineupIQSample] = []
    high_score_line = _threshold(HIGH_SCORER_THRESHOLDS, league)
    low_score_line = _threshold(BENCHWARMER_THRESHOLDS, league)
    roster_slots = league.team_data.roster_positions
    assignments = league.manager_data

    if placements:
        trophies.extend(_placement_trophies(league, placements))

    for matchup in matchups_by_week(league):
        opponent = matchup.opponent
        if opponent is None:
            continue

        for side in (matchup.team1, opponent):
            potential = potential_score(side, nfl_data.players, roster_slots)
            if not potential:
                continue
            manager_id = assignments.manager_for_team(side.team_id)
            lineup_iq = side.points / potential
            if lineup_iq > PERFECT_LINEUP_THRESHOLD:
                trophies.append(
                    Trophy(
                        trophy_type=TrophyType.OVERALL_HIGH_IQ,
                        year=league.year,
                        manager_id=manager_id,
                        week=matchup.week,
                        note=f"IQ: {lineup_iq * 100:.2f}%",
                    )
                )
            samples.append(
                LineupIQSample(
                    week=matchup.week,
                    manager_id=manager_id,
                    realized_score=side.points,
                    potential_score=potential,
                    lineup_iq=lineup_iq,
                )
            )

        team1_won = matchup.team1.points > opponent.points
        winner, loser = (matchup.team1, opponent) if team1_won else (opponent, matchup.team1)
        score = MatchupScore(
            week=matchup.week,
            winner_id=assignments.manager_for_team(winner.team_id),
            winner_score=winner.points,
            loser_id=assignments.manager_for_team(loser.team_id),
            loser_score=loser.points,
            margin=abs(matchup.team1.points - opponent.points),
        )
        scores.append(score)

        if score.winner_score >= high_score_line:
            trophies.append(
                Trophy(
                    trophy_type=TrophyType.OVERALL_HIGH_SCORE,
                    year=league.year,
                    manager_id=score.winner_id,
                    week=matchup.week,
                    note=score.note(score.winner_score),
                )
            )
        if score.loser_score < low_score_line:
            trophies.append(
                Trophy(
                    trophy_type=TrophyType.OVERALL_LOW_SCORE,
                    year=league.year,
                    manager_id=score.loser_id,
                    week=matchup.week,
                    note=(
                        f"{score.loser_score:.2f}pts ({score.winner_score:.2f}-{score.loser_score:.2f} "
                        f"against {score.winner_id})"
                    ),
                )
            )

        points_for[score.winner_id] += score.winner_score
        points_for[score.loser_id] += score.loser_score
        points_against[score.winner_id] += score.loser_score
        points_against[score.loser_id] += score.winner_score

    trophies.extend(_season_high_iq(league, samples))
    trophies.extend(_season_score_trophies(league, scores))
    if scores:
        trophies.extend(_season_total_trophies(league, points_for, points_against))

    return trophies, bool(scores or placements)


def compute_trophies(league_group: LeagueDefinition, leagues: dict[str, League], nfl_data: NFLData) -> TrophyData:
    manager_ids = [m.manager_id for m in group_managers(league_group, leagues)]
    trophies: list[Trophy] = []
    contributing_years: list[int] = []

    for league in league_group.seasons(leagues):
        season_trophies, contributed = _season_trophies(
            league,
            league_group.final_placements(league),
            manager_ids,
            nfl_data,
        )
        trophies.extend(season_trophies)
        if contributed:
            contributing_years.append(league.year)

    logger.debug("Awarded %d trophies for %s", len(trophies), league_group.name)
    return TrophyData(data_available_from_year=earliest_year(contributing_years), trophies=trophies)
