from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from .config import (
    MEDIAN_DEFAULT,
    MEDIAN_INCLUDE,
    MEDIAN_METHODS,
    MEDIAN_NONE,
    MEDIAN_ONLY,
    PERFECT_LINEUP_THRESHOLD,
    SCOPE_IN_SEASON,
    SCOPE_POSTSEASON,
)
from .models import (
    FantasyRecord,
    League,
    LeagueDefinition,
    LeagueYear,
    Manager,
    NFLData,
    RecordColumn,
    RecordDefinition,
    RecordGenerator,
)
from .positions import potential_score
from .schedule import (
    earliest_year,
    group_managers,
    is_postseason,
    matchups_by_week,
    week_label,
    weekly_medians,
)

# Per-manager rows are produced for the whole career (None) and for each scope.
CAREER_SCOPES: tuple[str | None, ...] = (None, SCOPE_IN_SEASON, SCOPE_POSTSEASON)

WIN = "W"
LOSS = "L"
STREAK_TRACKERS = ("total", "season", "playoff", "median")


def _row_key(manager_id: str, league_id: str | None, scope: str | None, median_method: str | None = None) -> str:
    parts = [manager_id]
    if league_id:
        parts.append(league_id)
    if scope:
        parts.append(scope)
    if median_method:
        parts.append(median_method)
    return "-".join(parts)


def _league_options(group: LeagueDefinition) -> list[LeagueYear | None]:
    return [None, *group.years]


def _build_record(
    definition: RecordDefinition,
    data_available_from_year: int | None,
    columns: list[RecordColumn],
    entries: list[dict[str, Any]],
) -> FantasyRecord:
    return FantasyRecord(
        name=definition.name,
        category=definition.category,
        data_available_from_year=data_available_from_year,
        columns=columns,
        key_field="key",
        entries=entries,
        display_all=definition.display_all,
        max_entries=definition.max_entries,
    )


@dataclass(slots=True)
class _Streak:
    streak: int = 0
    type: str = WIN


@dataclass(slots=True)
class StandingsTally:
    season_wins: int = 0
    season_losses: int = 0
    playoff_wins: int = 0
    playoff_losses: int = 0
    median_wins: int = 0
    median_losses: int = 0
    longest: dict[tuple[str, str], int] = field(
        default_factory=lambda: {(tracker, kind): 0 for tracker in STREAK_TRACKERS for kind in (WIN, LOSS)}
    )

    def games(self, median_method: str, scope: str | None) -> tuple[int, int]:
        wins = losses = 0
        if median_method != MEDIAN_ONLY:
            if scope != SCOPE_POSTSEASON:
                wins += self.season_wins
                losses += self.season_losses
            if scope != SCOPE_IN_SEASON:
                wins += self.playoff_wins
                losses += self.playoff_losses
        # Median pseudo-games only exist in the regular season.
        if median_method != MEDIAN_NONE and scope != SCOPE_POSTSEASON:
            wins += self.median_wins
            losses += self.median_losses
        return wins, losses


class StreakTracker:
    """Running win/loss streak per manager for one season and one kind of game.

    When a run ends, the ended run is compared against the manager's longest
    run of the same outcome; runs still open at season end are settled by
    :meth:`close`.
    """

    def __init__(self, name: str, manager_ids: list[str], tallies: dict[str, StandingsTally]) -> None:
        self.name = name
        self._tallies = tallies
        self._current = {manager_id: _Streak() for manager_id in manager_ids}

    def record(self, manager_id: str, outcome: str) -> None:
        current = self._current[manager_id]
        if current.type == outcome:
            current.streak += 1
            return
        longest = self._tallies[manager_id].longest
        if current.streak > longest[(self.name, current.type)]:
            longest[(self.name, current.type)] = current.streak
        self._current[manager_id] = _Streak(streak=1, type=outcome)

    def close(self) -> None:
        for manager_id, current in self._current.items():
            longest = self._tallies[manager_id].longest
            if current.streak > longest[(self.name, current.type)]:
                longest[(self.name, current.type)] = current.streak


def resolve_median_method(median_method: str, league: League) -> str:
    if median_method != MEDIAN_DEFAULT:
        return median_method
    return MEDIAN_INCLUDE if league.matchup_data.median_enabled else MEDIAN_NONE


def _streak_tracker_name(median_method: str, scope: str | None) -> str:
    if median_method == MEDIAN_ONLY:
        return "median"
    if scope == SCOPE_IN_SEASON:
        return "season"
    if scope == SCOPE_POSTSEASON:
        return "playoff"
    return "total"


def _tally_standings(
    managers: list[Manager],
    seasons: list[League],
) -> tuple[dict[str, dict[str, StandingsTally]], dict[str, set[int]], list[int]]:
    manager_ids = [m.manager_id for m in managers]
    tallies = {manager_id: {league.league_id: StandingsTally() for league in seasons} for manager_id in manager_ids}
    years_in_league: dict[str, set[int]] = {manager_id: set() for manager_id in manager_ids}
    contributing_years: list[int] = []

    for league in seasons:
        league_tallies = {manager_id: tallies[manager_id][league.league_id] for manager_id in manager_ids}
        trackers = {name: StreakTracker(name, manager_ids, league_tallies) for name in STREAK_TRACKERS}
        medians = weekly_medians(league)
        assignments = league.manager_data

        for matchup in matchups_by_week(league):
            opponent = matchup.opponent
            if opponent is None:
                continue
            contributing_years.append(league.year)
            postseason = is_postseason(league, matchup.week)

            team1_won = matchup.team1.points > opponent.points
            winner_team, loser_team = (matchup.team1, opponent) if team1_won else (opponent, matchup.team1)
            winner = assignments.manager_for_team(winner_team.team_id)
            loser = assignments.manager_for_team(loser_team.team_id)

            if postseason:
                league_tallies[winner].playoff_wins += 1
                league_tallies[loser].playoff_losses += 1
            else:
                league_tallies[winner].season_wins += 1
                league_tallies[loser].season_losses += 1

            years_in_league[winner].add(league.year)
            years_in_league[loser].add(league.year)

            split = trackers["playoff"] if postseason else trackers["season"]
            for tracker in (trackers["total"], split):
                tracker.record(winner, WIN)
                tracker.record(loser, LOSS)

            if postseason:
                continue
            week_median = medians[matchup.week]
            for side in (matchup.team1, opponent):
                manager_id = assignments.manager_for_team(side.team_id)
                if side.points >= week_median:
                    league_tallies[manager_id].median_wins += 1
                    trackers["median"].record(manager_id, WIN)
                else:
                    league_tallies[manager_id].median_losses += 1
                    trackers["median"].record(manager_id, LOSS)

        for tracker in trackers.values():
            tracker.close()

    return tallies, years_in_league, contributing_years


def manager_career_standings_record(sort_by: str) -> RecordGenerator:
    """sort_by: win, loss, years, win%, win-streak or loss-streak."""
    sort_keys: dict[str, Callable[[dict[str, Any]], float]] = {
        "win": lambda row: row["wins"],
        "loss": lambda row: row["losses"],
        "years": lambda row: row["years_in_league"],
        "win%": lambda row: row["win_percentage"],
        "win-streak": lambda row: row["longest_win_streak"],
        "loss-streak": lambda row: row["longest_loss_streak"],
    }
    sort_key = sort_keys[sort_by]

    def generate(
        definition: RecordDefinition,
        league_group: LeagueDefinition,
        leagues: dict[str, League],
        nfl_data: NFLData,
    ) -> FantasyRecord:
        managers = group_managers(league_group, leagues)
        seasons = {league.league_id: league for league in league_group.seasons(leagues)}
        tallies, years_in_league, contributing_years = _tally_standings(managers, list(seasons.values()))

        entries: list[dict[str, Any]] = []
        for manager in managers:
            manager_tallies = tallies[manager.manager_id]
            for scope in CAREER_SCOPES:
                for median_method in MEDIAN_METHODS:
                    for option in _league_options(league_group):
                        selected = league_group.years if option is None else [option]
                        wins = losses = 0
                        longest_win = longest_loss = 0
                        longest_win_note: str | None = None
                        longest_loss_note: str | None = None

                        for entry in selected:
                            league = seasons[entry.league_id]
                            tally = manager_tallies[entry.league_id]
                            method = resolve_median_method(median_method, league)
                            season_wins, season_losses = tally.games(method, scope)
                            wins += season_wins
                            losses += season_losses

                            tracker = _streak_tracker_name(method, scope)
                            season_win_streak = tally.longest[(tracker, WIN)]
                            season_loss_streak = tally.longest[(tracker, LOSS)]
                            if option is not None:
                                longest_win, longest_loss = season_win_streak, season_loss_streak
                                continue
                            if season_win_streak > longest_win:
                                longest_win = season_win_streak
                                longest_win_note = str(league.year)
                            if season_loss_streak > longest_loss:
                                longest_loss = season_loss_streak
                                longest_loss_note = str(league.year)

                        if wins + losses == 0:
                            continue
                        league_id = option.league_id if option is not None else None
                        entries.append(
                            {
                                "key": _row_key(manager.manager_id, league_id, scope, median_method),
                                "manager": manager.name,
                                "wins": wins,
                                "losses": losses,
                                "years_in_league": len(years_in_league[manager.manager_id]),
                                "win_percentage": wins / (wins + losses),
                                "longest_win_streak": longest_win,
                                "longest_win_streak_note": longest_win_note,
                                "longest_loss_streak": longest_loss,
                                "longest_loss_streak_note": longest_loss_note,
                                "league": league_id,
                                "scope": scope,
                                "median_method": median_method,
                            }
                        )

        entries.sort(key=sort_key, reverse=True)
        return _build_record(
            definition,
            earliest_year(contributing_years),
            [
                RecordColumn(key="manager", title="Manager", type="string"),
                RecordColumn(key="years_in_league", title="YiL", type="number"),
                RecordColumn(key="wins", title="Wins", type="number"),
                RecordColumn(key="losses", title="Losses", type="number"),
                RecordColumn(key="win_percentage", title="Win %", type="percentage", decimal_precision=2),
                RecordColumn(
                    key="longest_win_streak",
                    hint_key="longest_win_streak_note",
                    title="Longest Win Streak",
                    type="number",
                ),
                RecordColumn(
                    key="longest_loss_streak",
                    hint_key="longest_loss_streak_note",
                    title="Longest Loss Streak",
                    type="number",
                ),
            ],
            entries,
        )

    return generate


@dataclass(slots=True)
class LineupTally:
    perfect_lineups: int = 0
    potential_points: float = 0.0
    realized_points: float = 0.0

    def add(self, realized: float, potential: float) -> None:
        self.realized_points += realized
        self.potential_points += potential
        if potential > 0 and realized / potential > PERFECT_LINEUP_THRESHOLD:
            self.perfect_lineups += 1


def manager_career_lineup_record(sort_by: str) -> RecordGenerator:
    """sort_by: perfect-lineups, missed-points or lineup-iq."""
    sort_keys: dict[str, Callable[[dict[str, Any]], float]] = {
        "perfect-lineups": lambda row: row["perfect_lineups"],
        "missed-points": lambda row: -row["missed_points"],
        "lineup-iq": lambda row: row["lineup_iq"],
    }
    sort_key = sort_keys[sort_by]

    def generate(
        definition: RecordDefinition,
        league_group: LeagueDefinition,
        leagues: dict[str, League],
        nfl_data: NFLData,
    ) -> FantasyRecord:
        managers = group_managers(league_group, leagues)
        seasons = league_group.seasons(leagues)
        # (manager, league, postseason) -> tally
        tallies: dict[tuple[str, str, bool], LineupTally] = {
            (manager.manager_id, league.league_id, postseason): LineupTally()
            for manager in managers
            for league in seasons
            for postseason in (False, True)
        }
        contributing_years: list[int] = []

        for league in seasons:
            roster_slots = league.team_data.roster_positions
            for matchup in league.matchup_data.matchups:
                postseason = is_postseason(league, matchup.week)
                for side in matchup.sides():
                    potential = potential_score(side, nfl_data.players, roster_slots)
                    if potential is None:
                        continue
                    contributing_years.append(league.year)
                    manager_id = league.manager_data.manager_for_team(side.team_id)
                    tallies[(manager_id, league.league_id, postseason)].add(side.points, potential)

        entries: list[dict[str, Any]] = []
        for manager in managers:
            for scope in CAREER_SCOPES:
                for option in _league_options(league_group):
                    selected = league_group.years if option is None else [option]
                    combined = LineupTally()
                    for entry in selected:
                        for postseason in (False, True):
                            if postseason and scope == SCOPE_IN_SEASON:
                                continue
                            if not postseason and scope == SCOPE_POSTSEASON:
                                continue
                            tally = tallies[(manager.manager_id, entry.league_id, postseason)]
                            combined.perfect_lineups += tally.perfect_lineups
                            combined.potential_points += tally.potential_points
                            combined.realized_points += tally.realized_points

                    if combined.potential_points <= 0:
                        continue
                    league_id = option.league_id if option is not None else None
                    entries.append(
                        {
                            "key": _row_key(manager.manager_id, league_id, scope),
                            "manager": manager.name,
                            "perfect_lineups": combined.perfect_lineups,
                            "missed_points": combined.potential_points - combined.realized_points,
                            "lineup_iq": combined.realized_points / combined.potential_points,
                            "league": league_id,
                            "scope": scope,
                            "median_method": None,
                        }
                    )

        entries.sort(key=sort_key, reverse=True)
        return _build_record(
            definition,
            earliest_year(contributing_years),
            [
                RecordColumn(key="manager", title="Manager", type="string"),
                RecordColumn(key="perfect_lineups", title="Perfect Lineups", type="number"),
                RecordColumn(key="missed_points", title="Total Missed Points", type="number", decimal_precision=2),
                RecordColumn(key="lineup_iq", title="Lineup IQ", type="percentage", decimal_precision=2),
            ],
            entries,
        )

    return generate


@dataclass(slots=True)
class ScoringTally:
    highest_score: float | None = None
    highest_score_week: str = "N/A"
    lowest_score: float | None = None
    lowest_score_week: str = "N/A"
    points_forward: float = 0.0
    points_against: float = 0.0
    num_games: int = 0

    def add_game(self, points: float, against: float, label: str) -> None:
        self.points_forward += points
        self.points_against += against
        self.num_games += 1
        self.merge_extremes(points, label, points, label)

    def merge_extremes(self, high: float | None, high_week: str, low: float | None, low_week: str) -> None:
        if high is not None and (self.highest_score is None or high > self.highest_score):
            self.highest_score = high
            self.highest_score_week = high_week
        if low is not None and (self.lowest_score is None or low < self.lowest_score):
            self.lowest_score = low
            self.lowest_score_week = low_week

    def absorb(self, other: ScoringTally) -> None:
        self.points_forward += other.points_forward
        self.points_against += other.points_against
        self.num_games += other.num_games
        self.merge_extremes(other.highest_score, other.highest_score_week, other.lowest_score, other.lowest_score_week)


def manager_career_scoring_record(sort_by: str) -> RecordGenerator:
    """sort_by: high-score, low-score, points-forward, points-against,
    points-forward-per-game or points-against-per-game."""
    sort_keys: dict[str, Callable[[dict[str, Any]], float]] = {
        "high-score": lambda row: row["highest_score"],
        "low-score": lambda row: -row["lowest_score"],
        "points-forward": lambda row: row["points_forward"],
        "points-against": lambda row: row["points_against"],
        "points-forward-per-game": lambda row: row["points_forward_per_game"],
        "points-against-per-game": lambda row: row["points_against_per_game"],
    }
    sort_key = sort_keys[sort_by]

    def generate(
        definition: RecordDefinition,
        league_group: LeagueDefinition,
        leagues: dict[str, League],
        nfl_data: NFLData,
    ) -> FantasyRecord:
        managers = group_managers(league_group, leagues)
        seasons = league_group.seasons(leagues)
        tallies: dict[tuple[str, str, bool], ScoringTally] = {
            (manager.manager_id, league.league_id, postseason): ScoringTally()
            for manager in managers
            for league in seasons
            for postseason in (False, True)
        }
        contributing_years: list[int] = []

        for league in seasons:
            for matchup in league.matchup_data.matchups:
                opponent = matchup.opponent
                if opponent is None:
                    continue
                contributing_years.append(league.year)
                postseason = is_postseason(league, matchup.week)
                label = week_label(league, matchup.week)
                for side, other in ((matchup.team1, opponent), (opponent, matchup.team1)):
                    manager_id = league.manager_data.manager_for_team(side.team_id)
                    tallies[(manager_id, league.league_id, postseason)].add_game(side.points, other.points, label)

        entries: list[dict[str, Any]] = []
        for manager in managers:
            for scope in CAREER_SCOPES:
                for option in _league_options(league_group):
                    selected = league_group.years if option is None else [option]
                    combined = ScoringTally()
                    for entry in selected:
                        if scope != SCOPE_POSTSEASON:
                            combined.absorb(tallies[(manager.manager_id, entry.league_id, False)])
                        if scope != SCOPE_IN_SEASON:
                            combined.absorb(tallies[(manager.manager_id, entry.league_id, True)])

                    if combined.num_games == 0:
                        continue
                    league_id = option.league_id if option is not None else None
                    entries.append(
                        {
                            "key": _row_key(manager.manager_id, league_id, scope),
                            "manager": manager.name,
                            "highest_score": combined.highest_score,
                            "highest_score_week": combined.highest_score_week,
                            "lowest_score": combined.lowest_score,
                            "lowest_score_week": combined.lowest_score_week,
                            "points_forward": combined.points_forward,
                            "points_against": combined.points_against,
                            "num_games": combined.num_games,
                            "points_forward_per_game": combined.points_forward / combined.num_games,
                            "points_against_per_game": combined.points_against / combined.num_games,
                            "league": league_id,
                            "scope": scope,
                            "median_method": None,
                        }
                    )

        entries.sort(key=sort_key, reverse=True)
        return _build_record(
            definition,
            earliest_year(contributing_years),
            [
                RecordColumn(key="manager", title="Manager", type="string"),
                RecordColumn(
                    key="highest_score",
                    hint_key="highest_score_week",
                    title="Highest Score",
                    type="number",
                    decimal_precision=2,
                ),
                RecordColumn(
                    key="lowest_score",
                    hint_key="lowest_score_week",
                    title="Lowest Score",
                    type="number",
                    decimal_precision=2,
                ),
                RecordColumn(key="points_forward", title="PF", type="number", decimal_precision=2),
                RecordColumn(key="points_against", title="PA", type="number", decimal_precision=2),
                RecordColumn(key="num_games", title="G", type="number"),
                RecordColumn(key="points_forward_per_game", title="PFPG", type="number", decimal_precision=2),
                RecordColumn(key="points_against_per_game", title="PAPG", type="number", decimal_precision=2),
            ],
            entries,
        )

    return generate
