from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable

from .errors import MissingDataError


class MatchupSlot(str, Enum):
    BYE = "BYE"
    TBD = "TBD"


BYE = MatchupSlot.BYE
TBD = MatchupSlot.TBD


class TrophyType(str, Enum):
    PLACEMENT = "placement"
    OVERALL_HIGH_SCORE = "overall-high-score"
    OVERALL_LOW_SCORE = "overall-low-score"
    OVERALL_HIGH_IQ = "overall-high-iq"
    SEASON_HIGH_SCORE = "season-high-score"
    SEASON_NARROWEST_WIN = "season-narrowest-win"
    SEASON_LARGEST_BLOWOUT = "season-largest-blowout"
    SEASON_POINTS_FOR = "season-points-for"
    SEASON_POINTS_AGAINST = "season-points-against"
    SEASON_HIGH_IQ = "season-high-iq"


@dataclass(slots=True)
class Manager:
    manager_id: str
    name: str
    avatar: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Manager:
        return cls(manager_id=str(raw["manager_id"]), name=str(raw["name"]), avatar=raw.get("avatar"))


@dataclass(slots=True)
class Team:
    team_id: str
    league_id: str
    manager_id: str
    name: str
    avatar: str | None = None
    division: str | None = None
    players: list[str] = field(default_factory=list)
    bench: list[str] = field(default_factory=list)
    injury_reserve: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Team:
        return cls(
            team_id=str(raw["team_id"]),
            league_id=str(raw["league_id"]),
            manager_id=str(raw["manager_id"]),
            name=str(raw["name"]),
            avatar=raw.get("avatar"),
            division=raw.get("division"),
            players=[str(p) for p in raw.get("players", [])],
            bench=[str(p) for p in raw.get("bench", [])],
            injury_reserve=[str(p) for p in raw.get("injury_reserve", [])],
        )


@dataclass(slots=True)
class PlayerData:
    players: list[str | None]
    bench: list[str] = field(default_factory=list)
    injury_reserve: list[str] = field(default_factory=list)
    player_points: dict[str, float] = field(default_factory=dict)
    player_projected_points: dict[str, float] | None = None

    def candidate_pool(self) -> list[str]:
        """Starters (empty slots dropped), then bench, then IR."""
        return [p for p in self.players if p] + list(self.bench) + list(self.injury_reserve)

    @property
    def teamwide_score(self) -> float:
        return sum(self.player_points.values())

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PlayerData:
        projected = raw.get("player_projected_points")
        return cls(
            players=[str(p) if p else None for p in raw["players"]],
            bench=[str(p) for p in raw.get("bench", [])],
            injury_reserve=[str(p) for p in raw.get("injury_reserve", [])],
            player_points={str(k): float(v) for k, v in raw.get("player_points", {}).items()},
            player_projected_points=(
                {str(k): float(v) for k, v in projected.items()} if isinstance(projected, dict) else None
            ),
        )


@dataclass(slots=True)
class MatchupTeam:
    team_id: str
    points: float
    player_data: PlayerData | None = None

    @property
    def has_player_data(self) -> bool:
        return self.player_data is not None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "team_id": self.team_id,
            "points": self.points,
            "has_player_data": self.has_player_data,
        }
        if self.player_data is not None:
            payload.update(asdict(self.player_data))
        return payload

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MatchupTeam:
        has_player_data = bool(raw.get("has_player_data", "players" in raw))
        return cls(
            team_id=str(raw["team_id"]),
            points=float(raw["points"]),
            player_data=PlayerData.from_dict(raw) if has_player_data else None,
        )


@dataclass(slots=True)
class Matchup:
    matchup_id: str
    league_id: str
    week: int
    team1: MatchupTeam
    team2: MatchupTeam | MatchupSlot

    @property
    def opponent(self) -> MatchupTeam | None:
        return self.team2 if isinstance(self.team2, MatchupTeam) else None

    @property
    def is_decisive(self) -> bool:
        return isinstance(self.team2, MatchupTeam)

    def sides(self) -> list[MatchupTeam]:
        opponent = self.opponent
        return [self.team1] if opponent is None else [self.team1, opponent]

    def to_dict(self) -> dict[str, Any]:
        return {
            "matchup_id": self.matchup_id,
            "league_id": self.league_id,
            "week": self.week,
            "team1": self.team1.to_dict(),
            "team2": self.team2.value if isinstance(self.team2, MatchupSlot) else self.team2.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Matchup:
        raw_team2 = raw["team2"]
        team2: MatchupTeam | MatchupSlot
        if isinstance(raw_team2, str):
            team2 = MatchupSlot(raw_team2)
        else:
            team2 = MatchupTeam.from_dict(raw_team2)
        return cls(
            matchup_id=str(raw["matchup_id"]),
            league_id=str(raw["league_id"]),
            week=int(raw["week"]),
            team1=MatchupTeam.from_dict(raw["team1"]),
            team2=team2,
        )


@dataclass(slots=True)
class ManagerData:
    managers: dict[str, Manager]
    team_assignments: dict[str, str]

    def manager_for_team(self, team_id: str) -> str:
        for manager_id, assigned in self.team_assignments.items():
            if assigned == team_id:
                return manager_id
        raise MissingDataError(f"Team {team_id} is not assigned to any manager")

    def manager(self, manager_id: str) -> Manager:
        try:
            return self.managers[manager_id]
        except KeyError:
            raise MissingDataError(f"Unknown manager {manager_id}") from None

    def teams_to_managers(self) -> dict[str, str]:
        return {team_id: manager_id for manager_id, team_id in self.team_assignments.items()}


@dataclass(slots=True)
class TeamData:
    teams: dict[str, Team]
    roster_positions: list[str]
    bench_size: int = 0
    injury_reserve_size: int = 0
    playoff_qualified_teams: list[str] = field(default_factory=list)
    final_placements: dict[str, int] | None = None
    division_names: list[str] | None = None

    @property
    def team_count(self) -> int:
        return len(self.teams)

    def team(self, team_id: str) -> Team:
        try:
            return self.teams[team_id]
        except KeyError:
            raise MissingDataError(f"Unknown team {team_id}") from None


@dataclass(slots=True)
class MatchupData:
    matchups: list[Matchup]
    playoff_week_start: int
    total_week_count: int
    median_enabled: bool = False
    playoff_spots: int = 0


@dataclass(slots=True)
class Transaction:
    transaction_id: str
    type: str
    involved_teams: list[str]
    week: int
    timestamp: int


@dataclass(slots=True)
class TransactionData:
    waiver_type: str = "normal"
    waiver_max_budget: int | None = None
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def has_transaction_data(self) -> bool:
        return bool(self.transactions)


@dataclass(slots=True)
class League:
    league_id: str
    year: int
    league_type: str
    status: str
    manager_data: ManagerData
    team_data: TeamData
    matchup_data: MatchupData
    transaction_data: TransactionData = field(default_factory=TransactionData)

    def team_label(self, team_id: str) -> str:
        team = self.team_data.team(team_id)
        manager = self.manager_data.manager(team.manager_id)
        return f"{team.name} ({manager.name})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "league_id": self.league_id,
            "year": self.year,
            "league_type": self.league_type,
            "status": self.status,
            "manager_data": {
                "managers": {k: asdict(v) for k, v in self.manager_data.managers.items()},
                "team_assignments": dict(self.manager_data.team_assignments),
            },
            "team_data": {
                "teams": {k: asdict(v) for k, v in self.team_data.teams.items()},
                "team_count": self.team_data.team_count,
                "roster_positions": list(self.team_data.roster_positions),
                "bench_size": self.team_data.bench_size,
                "injury_reserve_size": self.team_data.injury_reserve_size,
                "playoff_qualified_teams": list(self.team_data.playoff_qualified_teams),
                "final_placements": (
                    dict(self.team_data.final_placements) if self.team_data.final_placements is not None else None
                ),
                "division_names": self.team_data.division_names,
            },
            "matchup_data": {
                "matchups": [m.to_dict() for m in self.matchup_data.matchups],
                "playoff_week_start": self.matchup_data.playoff_week_start,
                "total_week_count": self.matchup_data.total_week_count,
                "median_enabled": self.matchup_data.median_enabled,
                "playoff_spots": self.matchup_data.playoff_spots,
            },
            "transaction_data": asdict(self.transaction_data),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> League:
        raw_managers = raw["manager_data"]
        raw_teams = raw["team_data"]
        raw_matchups = raw["matchup_data"]
        raw_transactions = raw.get("transaction_data") or {}
        placements = raw_teams.get("final_placements")
        return cls(
            league_id=str(raw["league_id"]),
            year=int(raw["year"]),
            league_type=str(raw["league_type"]),
            status=str(raw.get("status", "complete")),
            manager_data=ManagerData(
                managers={str(k): Manager.from_dict(v) for k, v in raw_managers["managers"].items()},
                team_assignments={str(k): str(v) for k, v in raw_managers["team_assignments"].items()},
            ),
            team_data=TeamData(
                teams={str(k): Team.from_dict(v) for k, v in raw_teams["teams"].items()},
                roster_positions=[str(p) for p in raw_teams["roster_positions"]],
                bench_size=int(raw_teams.get("bench_size", 0)),
                injury_reserve_size=int(raw_teams.get("injury_reserve_size", 0)),
                playoff_qualified_teams=[str(t) for t in raw_teams.get("playoff_qualified_teams", [])],
                final_placements=(
                    {str(k): int(v) for k, v in placements.items()} if isinstance(placements, dict) else None
                ),
                division_names=raw_teams.get("division_names"),
            ),
            matchup_data=MatchupData(
                matchups=[Matchup.from_dict(m) for m in raw_matchups["matchups"]],
                playoff_week_start=int(raw_matchups["playoff_week_start"]),
                total_week_count=int(raw_matchups.get("total_week_count", 0)),
                median_enabled=bool(raw_matchups.get("median_enabled", False)),
                playoff_spots=int(raw_matchups.get("playoff_spots", 0)),
            ),
            transaction_data=TransactionData(
                waiver_type=str(raw_transactions.get("waiver_type", "normal")),
                waiver_max_budget=raw_transactions.get("waiver_max_budget"),
                transactions=[
                    Transaction(
                        transaction_id=str(t["transaction_id"]),
                        type=str(t["type"]),
                        involved_teams=[str(x) for x in t.get("involved_teams", [])],
                        week=int(t.get("week", 0)),
                        timestamp=int(t.get("timestamp", 0)),
                    )
                    for t in raw_transactions.get("transactions", [])
                ],
            ),
        )


@dataclass(slots=True)
class NFLPlayer:
    player_id: str
    full_name: str
    positions: list[str] = field(default_factory=list)
    nfl_position: str | None = None
    nfl_team_id: str | None = None
    age: int | None = None
    jersey_number: int | None = None
    injury_status: str | None = None
    avatar: str | None = None

    @property
    def eligible_positions(self) -> list[str]:
        """The single position a player can start at; ``positions`` only fills in a missing one."""
        if self.nfl_position:
            return [self.nfl_position]
        return self.positions[:1]

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> NFLPlayer:
        return cls(
            player_id=str(raw["player_id"]),
            full_name=str(raw.get("full_name", "")),
            positions=[str(p) for p in raw.get("positions", [])],
            nfl_position=raw.get("nfl_position"),
            nfl_team_id=raw.get("nfl_team_id"),
            age=raw.get("age"),
            jersey_number=raw.get("jersey_number"),
            injury_status=raw.get("injury_status"),
            avatar=raw.get("avatar"),
        )


@dataclass(slots=True)
class NFLTeam:
    nfl_team_id: str
    name: str
    short_code: str
    avatar: str | None = None


@dataclass(slots=True)
class NFLData:
    players: dict[str, NFLPlayer] = field(default_factory=dict)
    teams: dict[str, NFLTeam] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": {k: asdict(v) for k, v in self.players.items()},
            "teams": {k: asdict(v) for k, v in self.teams.items()},
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> NFLData:
        return cls(
            players={str(k): NFLPlayer.from_dict(v) for k, v in raw.get("players", {}).items()},
            teams={
                str(k): NFLTeam(
                    nfl_team_id=str(v["nfl_team_id"]),
                    name=str(v["name"]),
                    short_code=str(v.get("short_code", "")),
                    avatar=v.get("avatar"),
                )
                for k, v in raw.get("teams", {}).items()
            },
        )


@dataclass(slots=True)
class LeagueYear:
    year: int
    league_id: str
    source: str = "db"
    internal_id: str | None = None
    final_placements: dict[str, int] | None = None


@dataclass(slots=True)
class LeagueDefinition:
    name: str
    league_type: str
    years: list[LeagueYear]
    color: str = "#1f3a93"

    def seasons(self, leagues: dict[str, League]) -> list[League]:
        """The group's seasons in configured order; an unknown league id is a data bug."""
        seasons: list[League] = []
        for entry in self.years:
            league = leagues.get(entry.league_id)
            if league is None:
                raise MissingDataError(f"League {entry.league_id} ({self.name} {entry.year}) was not supplied")
            seasons.append(league)
        return seasons

    def final_placements(self, league: League) -> dict[str, int] | None:
        for entry in self.years:
            if entry.league_id == league.league_id and entry.final_placements is not None:
                return entry.final_placements
        return league.team_data.final_placements

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> LeagueDefinition:
        years: list[LeagueYear] = []
        for entry in raw["years"]:
            placements = entry.get("final_placements")
            years.append(
                LeagueYear(
                    year=int(entry["year"]),
                    league_id=str(entry["league_id"]),
                    source=str(entry.get("source", "db")),
                    internal_id=entry.get("internal_id"),
                    final_placements=(
                        {str(k): int(v) for k, v in placements.items()} if isinstance(placements, dict) else None
                    ),
                )
            )
        return cls(
            name=str(raw["name"]),
            league_type=str(raw.get("league_type", "redraft")),
            color=str(raw.get("color", "#1f3a93")),
            years=years,
        )


@dataclass(slots=True)
class ManagerDefinition:
    manager_id: str
    name: str | None = None
    external_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class LeagueConfig:
    name: str
    leagues: list[LeagueDefinition]
    managers: list[ManagerDefinition] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "leagues": [league.to_dict() for league in self.leagues],
            "managers": [asdict(m) for m in self.managers],
        }


@dataclass(slots=True)
class RecordColumn:
    key: str
    title: str
    type: str
    hint_key: str | None = None
    decimal_precision: int | None = None
    important: bool = False


@dataclass(slots=True)
class FantasyRecord:
    name: str
    category: str
    data_available_from_year: int | None
    columns: list[RecordColumn]
    key_field: str
    entries: list[dict[str, Any]]
    display_all: bool = False
    max_entries: int | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["type"] = "record"
        return payload


@dataclass(slots=True)
class RecordCategory:
    name: str
    category: str
    children: list[FantasyRecord]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "category",
            "name": self.name,
            "category": self.category,
            "children": [child.to_dict() for child in self.children],
        }


RecordGenerator = Callable[["RecordDefinition", LeagueDefinition, dict[str, League], NFLData], FantasyRecord]


@dataclass(slots=True)
class RecordDefinition:
    name: str
    category: str
    generate_record: RecordGenerator
    display_all: bool = False
    max_entries: int | None = None
    is_available: Callable[[LeagueDefinition], bool] | None = None


@dataclass(slots=True)
class RecordCategoryDefinition:
    name: str
    category: str
    children: list[RecordDefinition]


@dataclass(slots=True)
class MatchupTally:
    wins: int = 0
    count: int = 0


@dataclass(slots=True)
class ManagerMatchupData:
    data_available_from_year: int | None
    data: dict[str, dict[str, MatchupTally]]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Trophy:
    trophy_type: TrophyType
    year: int
    manager_id: str
    placement: int | None = None
    week: int | None = None
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "trophy_type": self.trophy_type.value,
            "year": self.year,
            "manager_id": self.manager_id,
            "placement": self.placement,
            "week": self.week,
            "note": self.note,
        }


@dataclass(slots=True)
class TrophyData:
    data_available_from_year: int | None
    trophies: list[Trophy]

    def to_dict(self) -> dict[str, Any]:
        return {
            "data_available_from_year": self.data_available_from_year,
            "trophies": [t.to_dict() for t in self.trophies],
        }
