"""Record catalog and the single-week record families.

Every record is produced by a generator closed over its sort settings; the
catalog below pairs generators with the names and categories shown in the
record book. Career families live in :mod:`career`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .career import (
    manager_career_lineup_record,
    manager_career_scoring_record,
    manager_career_standings_record,
)
from .config import CATEGORY_MANAGER, CATEGORY_OVERALL, WEEKLY_MAX_ENTRIES
from .errors import MissingDataError
from .models import (
    FantasyRecord,
    League,
    LeagueDefinition,
    Matchup,
    MatchupSlot,
    MatchupTeam,
    NFLData,
    RecordCategory,
    RecordCategoryDefinition,
    RecordColumn,
    RecordDefinition,
    RecordGenerator,
)
from .positions import potential_score
from .schedule import earliest_year, matchup_scope, week_label

logger = logging.getLogger(__name__)

WEEKLY_SORT_FIELDS = ("score", "differential", "winner-score", "loser-score")
SORT_ORDERS = ("highest", "lowest")


def _row_key(matchup: Matchup, league: League, team_id: str) -> str:
    return f"{matchup.matchup_id}-{league.league_id}-{matchup.week}-{team_id}"


def _against_label(league: League, matchup: Matchup, side: MatchupTeam) -> str:
    if isinstance(matchup.team2, MatchupSlot):
        return matchup.team2.value
    other = matchup.team2 if side is matchup.team1 else matchup.team1
    return league.team_label(other.team_id)


def _sorted(entries: list[dict[str, Any]], field: str, sort_order: str) -> list[dict[str, Any]]:
    if sort_order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order: {sort_order}")
    return sorted(entries, key=lambda row: row[field], reverse=sort_order == "highest")


def _weekly_columns(*score_columns: RecordColumn) -> list[RecordColumn]:
    return [
        RecordColumn(key="team", title="Team / Manager", type="string"),
        RecordColumn(key="week", title="Week", type="string"),
        RecordColumn(key="against_team", title="Opponent", type="string"),
        *score_columns,
    ]


def _record(
    definition: RecordDefinition,
    years: list[int],
    columns: list[RecordColumn],
    entries: list[dict[str, Any]],
) -> FantasyRecord:
    return FantasyRecord(
        name=definition.name,
        category=definition.category,
        data_available_from_year=earliest_year(years),
        columns=columns,
        key_field="key",
        entries=entries,
        display_all=definition.display_all,
        max_entries=definition.max_entries,
    )


def weekly_score_record(sort_by: str, sort_order: str) -> RecordGenerator:
    """Single-week scores of decided matchups.

    ``score`` keeps both sides of every matchup. ``differential`` and
    ``winner-score`` keep the side that outscored its opponent, ``loser-score``
    keeps the other one. Differential sorts on the margin, the rest on the
    kept side's score.
    """
    if sort_by not in WEEKLY_SORT_FIELDS:
        raise ValueError(f"Unknown weekly sort field: {sort_by}")
    keep_loser = sort_by == "loser-score"
    sort_field = "score_delta" if sort_by == "differential" else "score"

    def row(league: League, matchup: Matchup, side: MatchupTeam, other: MatchupTeam) -> dict[str, Any]:
        delta = abs(side.points - other.points)
        return {
            "key": _row_key(matchup, league, side.team_id),
            "team": league.team_label(side.team_id),
            "week": week_label(league, matchup.week),
            "against_team": league.team_label(other.team_id),
            "scores": f"{side.points:,.2f} - {other.points:,.2f} (Δ {delta:,.2f})",
            "score": side.points,
            "score_delta": delta,
            "league": league.league_id,
            "scope": matchup_scope(league, matchup.week, side.team_id),
            "median_method": None,
        }

    def generate(
        definition: RecordDefinition,
        league_group: LeagueDefinition,
        leagues: dict[str, League],
        nfl_data: NFLData,
    ) -> FantasyRecord:
        entries: list[dict[str, Any]] = []
        years: list[int] = []
        for league in league_group.seasons(leagues):
            for matchup in league.matchup_data.matchups:
                opponent = matchup.opponent
                if opponent is None:
                    continue
                years.append(league.year)
                delta = matchup.team1.points - opponent.points
                if sort_by == "score" or (delta > 0) != keep_loser:
                    entries.append(row(league, matchup, matchup.team1, opponent))
                if sort_by == "score" or (delta < 0) != keep_loser:
                    entries.append(row(league, matchup, opponent, matchup.team1))

        return _record(
            definition,
            years,
            _weekly_columns(
                RecordColumn(key="scores", title="Score", type="string", important=True),
            ),
            _sorted(entries, sort_field, sort_order),
        )

    return generate


def weekly_teamwide_record(sort_by: str, sort_order: str) -> RecordGenerator:
    """sort_by: ``total`` (every rostered player's points) or ``bench``."""
    sort_field = {"total": "score", "bench": "bench_score"}[sort_by]

    def generate(
        definition: RecordDefinition,
        league_group: LeagueDefinition,
        leagues: dict[str, League],
        nfl_data: NFLData,
    ) -> FantasyRecord:
        entries: list[dict[str, Any]] = []
        years: list[int] = []
        for league in league_group.seasons(leagues):
            for matchup in league.matchup_data.matchups:
                for side in reversed(matchup.sides()):
                    if side.player_data is None:
                        continue
                    years.append(league.year)
                    teamwide = side.player_data.teamwide_score
                    entries.append(
                        {
                            "key": _row_key(matchup, league, side.team_id),
                            "team": league.team_label(side.team_id),
                            "week": week_label(league, matchup.week),
                            "against_team": _against_label(league, matchup, side),
                            "score": teamwide,
                            "actual_score": side.points,
                            "bench_score": teamwide - side.points,
                            "league": league.league_id,
                            "scope": matchup_scope(league, matchup.week, side.team_id),
                            "median_method": None,
                        }
                    )

        return _record(
            definition,
            years,
            _weekly_columns(
                RecordColumn(key="score", title="Teamwide Score", type="number", decimal_precision=2, important=True),
                RecordColumn(key="actual_score", title="Actual Score", type="number", decimal_precision=2),
                RecordColumn(key="bench_score", title="Bench Score", type="number", decimal_precision=2),
            ),
            _sorted(entries, sort_field, sort_order),
        )

    return generate


def weekly_potential_record(sort_by: str, sort_order: str) -> RecordGenerator:
    """sort_by: ``score`` (optimal lineup points) or ``ratio`` (realized / optimal)."""
    sort_field = {"score": "score", "ratio": "realized_score_ratio"}[sort_by]

    def generate(
        definition: RecordDefinition,
        league_group: LeagueDefinition,
        leagues: dict[str, League],
        nfl_data: NFLData,
    ) -> FantasyRecord:
        entries: list[dict[str, Any]] = []
        years: list[int] = []
        for league in league_group.seasons(leagues):
            roster_slots = league.team_data.roster_positions
            for matchup in league.matchup_data.matchups:
                for side in reversed(matchup.sides()):
                    potential = potential_score(side, nfl_data.players, roster_slots)
                    if not potential:
                        continue
                    years.append(league.year)
                    entries.append(
                        {
                            "key": _row_key(matchup, league, side.team_id),
                            "team": league.team_label(side.team_id),
                            "week": week_label(league, matchup.week),
                            "against_team": _against_label(league, matchup, side),
                            "score": potential,
                            "actual_score": side.points,
                            "realized_score_ratio": side.points / potential,
                            "league": league.league_id,
                            "scope": matchup_scope(league, matchup.week, side.team_id),
                            "median_method": None,
                        }
                    )

        return _record(
            definition,
            years,
            _weekly_columns(
                RecordColumn(key="score", title="Potential Score", type="number", decimal_precision=2, important=True),
                RecordColumn(key="actual_score", title="Actual Score", type="number", decimal_precision=2),
                RecordColumn(
                    key="realized_score_ratio",
                    title="Realized",
                    type="percentage",
                    decimal_precision=2,
                    important=True,
                ),
            ),
            _sorted(entries, sort_field, sort_order),
        )

    return generate


def _weekly(name: str, generator: RecordGenerator) -> RecordDefinition:
    return RecordDefinition(
        name=name,
        category=CATEGORY_OVERALL,
        generate_record=generator,
        max_entries=WEEKLY_MAX_ENTRIES,
    )


def _career(
    name: str,
    generator: RecordGenerator,
    is_available: Callable[[LeagueDefinition], bool] | None = None,
) -> RecordDefinition:
    return RecordDefinition(
        name=name,
        category=CATEGORY_MANAGER,
        generate_record=generator,
        display_all=True,
        is_available=is_available,
    )


def spans_several_seasons(league_group: LeagueDefinition) -> bool:
    return len(league_group.years) > 1


RECORD_DEFINITIONS: list[RecordCategoryDefinition] = [
    RecordCategoryDefinition(
        name="Single Week Scores",
        category=CATEGORY_OVERALL,
        children=[
            _weekly("Highest score", weekly_score_record("score", "highest")),
            _weekly("Lowest score", weekly_score_record("score", "lowest")),
            _weekly("Largest blowout", weekly_score_record("differential", "highest")),
            _weekly("Narrowest win", weekly_score_record("differential", "lowest")),
            _weekly("Highest scoring loss", weekly_score_record("loser-score", "highest")),
            _weekly("Lowest scoring win", weekly_score_record("winner-score", "lowest")),
        ],
    ),
    RecordCategoryDefinition(
        name="Single Week Teamwide Scores",
        category=CATEGORY_OVERALL,
        children=[
            _weekly("Highest teamwide score", weekly_teamwide_record("total", "highest")),
            _weekly("Lowest teamwide score", weekly_teamwide_record("total", "lowest")),
            _weekly("Highest bench score", weekly_teamwide_record("bench", "highest")),
            _weekly("Lowest bench score", weekly_teamwide_record("bench", "lowest")),
        ],
    ),
    RecordCategoryDefinition(
        name="Single Week Potential Score",
        category=CATEGORY_OVERALL,
        children=[
            _weekly("Highest potential points", weekly_potential_record("score", "highest")),
            _weekly("Lowest potential points", weekly_potential_record("score", "lowest")),
            _weekly("Highest realized points ratio", weekly_potential_record("ratio", "highest")),
            _weekly("Lowest realized points ratio", weekly_potential_record("ratio", "lowest")),
        ],
    ),
    RecordCategoryDefinition(
        name="Career Standings",
        category=CATEGORY_MANAGER,
        children=[
            _career("Most wins", manager_career_standings_record("win")),
            _career("Most losses", manager_career_standings_record("loss")),
            _career(
                "Most years in league (YiL)",
                manager_career_standings_record("years"),
                is_available=spans_several_seasons,
            ),
            _career("Highest win percentage", manager_career_standings_record("win%")),
            _career("Highest win streak", manager_career_standings_record("win-streak")),
            _career("Highest loss streak", manager_career_standings_record("loss-streak")),
        ],
    ),
    RecordCategoryDefinition(
        name="Career Lineup IQ",
        category=CATEGORY_MANAGER,
        children=[
            _career("Most perfect lineups", manager_career_lineup_record("perfect-lineups")),
            _career("Fewest total missed points", manager_career_lineup_record("missed-points")),
            _career("Highest lineup IQ", manager_career_lineup_record("lineup-iq")),
        ],
    ),
    RecordCategoryDefinition(
        name="Career Scores",
        category=CATEGORY_MANAGER,
        children=[
            _career("Highest highest score", manager_career_scoring_record("high-score")),
            _career("Lowest lowest score", manager_career_scoring_record("low-score")),
            _career("Highest total points forward (PF)", manager_career_scoring_record("points-forward")),
            _career("Highest total points against (PA)", manager_career_scoring_record("points-against")),
            _career(
                "Highest average points forward per game (PFPG)",
                manager_career_scoring_record("points-forward-per-game"),
            ),
            _career(
                "Highest average points against per game (PAPG)",
                manager_career_scoring_record("points-against-per-game"),
            ),
        ],
    ),
]


def iter_definitions() -> list[RecordDefinition]:
    return [child for category in RECORD_DEFINITIONS for child in category.children]


def find_definition(name: str) -> RecordDefinition:
    for definition in iter_definitions():
        if definition.name == name:
            return definition
    raise MissingDataError(f"Unknown record: {name}")


def generate_record(
    definition: RecordDefinition,
    league_group: LeagueDefinition,
    leagues: dict[str, League],
    nfl_data: NFLData,
) -> FantasyRecord:
    return definition.generate_record(definition, league_group, leagues, nfl_data)


def generate_records(
    league_group: LeagueDefinition,
    leagues: dict[str, League],
    nfl_data: NFLData,
) -> list[RecordCategory]:
    categories: list[RecordCategory] = []
    for category in RECORD_DEFINITIONS:
        children = [
            generate_record(definition, league_group, leagues, nfl_data)
            for definition in category.children
            if definition.is_available is None or definition.is_available(league_group)
        ]
        categories.append(RecordCategory(name=category.name, category=category.category, children=children))
    logger.debug(
        "Generated %d records for %s",
        sum(len(category.children) for category in categories),
        league_group.name,
    )
    return categories
