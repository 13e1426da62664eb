from __future__ import annotations

import logging

from .config import MEDIAN_OPPONENT
from .models import League, LeagueDefinition, ManagerMatchupData, MatchupTally
from .schedule import earliest_year, group_managers, is_postseason, matchups_by_week, weekly_medians

logger = logging.getLogger(__name__)


def _empty_matrix(manager_ids: list[str]) -> dict[str, dict[str, MatchupTally]]:
    matrix: dict[str, dict[str, MatchupTally]] = {}
    for manager_id in manager_ids:
        row = {MEDIAN_OPPONENT: MatchupTally()}
        for opponent_id in manager_ids:
            row[opponent_id] = MatchupTally()
        matrix[manager_id] = row
    return matrix


def compute_manager_matchups(league_group: LeagueDefinition, leagues: dict[str, League]) -> ManagerMatchupData:
    """Head-to-head wins/games between every pair of managers, plus a weekly-median column.

    Every regular-season side, including team1 of a BYE or TBD matchup, plays
    the week's median. Head-to-head cells only count decided matchups.
    """
    manager_ids = [m.manager_id for m in group_managers(league_group, leagues)]
    matrix = _empty_matrix(manager_ids)
    seasons = league_group.seasons(leagues)

    for league in seasons:
        medians = weekly_medians(league)
        assignments = league.manager_data

        for matchup in matchups_by_week(league):
            if not is_postseason(league, matchup.week):
                week_median = medians.get(matchup.week)
                for side in matchup.sides():
                    cell = matrix[assignments.manager_for_team(side.team_id)][MEDIAN_OPPONENT]
                    cell.count += 1
                    if week_median is not None and side.points >= week_median:
                        cell.wins += 1

            opponent = matchup.opponent
            if opponent is None:
                continue

            # Strict comparison: an exact tie goes to team2.
            team1_won = matchup.team1.points > opponent.points
            winner_team, loser_team = (matchup.team1, opponent) if team1_won else (opponent, matchup.team1)
            winner = assignments.manager_for_team(winner_team.team_id)
            loser = assignments.manager_for_team(loser_team.team_id)

            matrix[winner][loser].count += 1
            matrix[loser][winner].count += 1
            matrix[winner][loser].wins += 1

    logger.debug("Computed manager matchups for %s across %d seasons", league_group.name, len(seasons))
    return ManagerMatchupData(
        data_available_from_year=earliest_year(league.year for league in seasons),
        data=matrix,
    )
