from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from .config import SCOPE_IN_SEASON, SCOPE_PLAYOFFS, SCOPE_TOILET_BOWL
from .models import League, LeagueDefinition, Manager, Matchup


def matchups_by_week(league: League) -> list[Matchup]:
    """Schedule order without touching the league's own list."""
    return sorted(league.matchup_data.matchups, key=lambda m: m.week)


def is_postseason(league: League, week: int) -> bool:
    return week >= league.matchup_data.playoff_week_start


def matchup_scope(league: League, week: int, team_id: str) -> str:
    if not is_postseason(league, week):
        return SCOPE_IN_SEASON
    if team_id in league.team_data.playoff_qualified_teams:
        return SCOPE_PLAYOFFS
    return SCOPE_TOILET_BOWL


def week_label(league: League, week: int) -> str:
    return f"{league.year} WK {week}"


def median(scores: Iterable[float]) -> float | None:
    ordered = sorted(scores)
    if not ordered:
        return None
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def weekly_medians(league: League) -> dict[int, float]:
    """Median of every score posted in each week's decided matchups."""
    scores_per_week: dict[int, list[float]] = defaultdict(list)
    for matchup in league.matchup_data.matchups:
        opponent = matchup.opponent
        if opponent is None:
            continue
        scores_per_week[matchup.week].extend((matchup.team1.points, opponent.points))
    medians: dict[int, float] = {}
    for week, scores in scores_per_week.items():
        value = median(scores)
        if value is not None:
            medians[week] = value
    return medians


def group_managers(group: LeagueDefinition, leagues: dict[str, League]) -> list[Manager]:
    """Every manager seen in any of the group's seasons, first-seen order."""
    seen: dict[str, Manager] = {}
    for league in group.seasons(leagues):
        for manager in league.manager_data.managers.values():
            seen.setdefault(manager.manager_id, manager)
    return list(seen.values())


def earliest_year(years: Iterable[int]) -> int | None:
    collected = list(years)
    return min(collected) if collected else None
