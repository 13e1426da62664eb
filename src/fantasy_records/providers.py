"""JSON-cache backed suppliers of league seasons, the NFL directory and the league config.

The cache directory holds one ``leagues/<league_id>.json`` file per season
and a single ``nfl.json``. Everything is read lazily and memoised for the
lifetime of the provider instance.
"""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable

from .errors import DataUnavailableError, MissingDataError
from .models import (
    League,
    LeagueConfig,
    LeagueDefinition,
    Manager,
    ManagerData,
    ManagerDefinition,
    NFLData,
)

logger = logging.getLogger(__name__)


def _read_json(path: Path, what: str, league_id: str | None = None) -> dict[str, Any]:
    if not path.exists():
        raise DataUnavailableError(f"{what} not found at {path}", league_id=league_id)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise DataUnavailableError(f"Failed to read {what} ({exc})", league_id=league_id) from exc
    if not isinstance(raw, dict):
        raise DataUnavailableError(f"{what} has invalid format", league_id=league_id)
    return raw


def _write_json_with_backup(path: Path, payload: Any, *, with_backup: bool = True) -> None:
    if with_backup and path.exists():
        backup = path.with_suffix(path.suffix + ".bak")
        try:
            shutil.copy2(path, backup)
        except OSError:
            logger.warning("Could not back up %s before overwriting", path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def remap_managers(league: League, resolve: Callable[[str], str]) -> League:
    """Copy of ``league`` with every manager id rewritten to its stable id."""
    source = league.manager_data
    managers: dict[str, Manager] = {}
    for manager_id, manager in source.managers.items():
        stable = resolve(manager_id)
        if stable in managers:
            raise DataUnavailableError(
                f"Managers {managers[stable].name!r} and {manager.name!r} both map to {stable}",
                league_id=league.league_id,
            )
        managers[stable] = replace(manager, manager_id=stable)
    assignments = {resolve(manager_id): team_id for manager_id, team_id in source.team_assignments.items()}
    if len(assignments) != len(source.team_assignments):
        raise DataUnavailableError("Two team assignments map to the same manager", league_id=league.league_id)
    teams = {
        team_id: replace(team, manager_id=resolve(team.manager_id)) for team_id, team in league.team_data.teams.items()
    }
    return replace(
        league,
        manager_data=ManagerData(managers=managers, team_assignments=assignments),
        team_data=replace(league.team_data, teams=teams),
    )


class ConfigProvider:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._config: LeagueConfig | None = None

    def load(self) -> LeagueConfig:
        if self._config is not None:
            return self._config
        raw = _read_json(self.path, "League config")
        try:
            config = LeagueConfig(
                name=str(raw.get("name", "")),
                leagues=[LeagueDefinition.from_dict(entry) for entry in raw.get("leagues", [])],
                managers=[
                    ManagerDefinition(
                        manager_id=str(entry["manager_id"]),
                        name=entry.get("name"),
                        external_ids=[str(x) for x in entry.get("external_ids", [])],
                    )
                    for entry in raw.get("managers", [])
                ],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DataUnavailableError(f"League config is malformed ({exc})") from exc
        logger.info("Loaded config %r with %d league groups", config.name, len(config.leagues))
        self._config = config
        return config

    def group(self, name: str) -> LeagueDefinition:
        for league in self.load().leagues:
            if league.name == name:
                return league
        raise MissingDataError(f"Unknown league group: {name}")

    def resolve_manager(self, external_id: str) -> str:
        """Stable manager id for an upstream user id; unmapped ids pass through."""
        for manager in self.load().managers:
            if external_id == manager.manager_id or external_id in manager.external_ids:
                return manager.manager_id
        return external_id

    def clear(self) -> None:
        self._config = None


class LeagueDataProvider:
    def __init__(self, cache_dir: str | Path, resolve_manager: Callable[[str], str] | None = None) -> None:
        self.cache_dir = Path(cache_dir)
        self.resolve_manager = resolve_manager
        self._leagues: dict[str, League] = {}
        self._nfl_data: NFLData | None = None

    def league_path(self, league_id: str) -> Path:
        return self.cache_dir / "leagues" / f"{league_id}.json"

    @property
    def nfl_path(self) -> Path:
        return self.cache_dir / "nfl.json"

    def load_league(self, league_id: str) -> League:
        cached = self._leagues.get(league_id)
        if cached is not None:
            return cached
        raw = _read_json(self.league_path(league_id), f"League {league_id}", league_id=league_id)
        try:
            league = League.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            raise DataUnavailableError(f"League {league_id} is malformed ({exc})", league_id=league_id) from exc
        if league.league_id != league_id:
            raise DataUnavailableError(
                f"League file for {league_id} contains league {league.league_id}", league_id=league_id
            )
        if self.resolve_manager is not None:
            league = remap_managers(league, self.resolve_manager)
        logger.debug("Loaded league %s (%d)", league_id, league.year)
        self._leagues[league_id] = league
        return league

    def load_group(self, group: LeagueDefinition) -> dict[str, League]:
        return {entry.league_id: self.load_league(entry.league_id) for entry in group.years}

    def load_nfl_data(self) -> NFLData:
        if self._nfl_data is not None:
            return self._nfl_data
        raw = _read_json(self.nfl_path, "NFL data")
        try:
            nfl_data = NFLData.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            raise DataUnavailableError(f"NFL data is malformed ({exc})") from exc
        logger.debug("Loaded %d NFL players", len(nfl_data.players))
        self._nfl_data = nfl_data
        return nfl_data

    def store_league(self, league: League) -> None:
        _write_json_with_backup(self.league_path(league.league_id), league.to_dict())
        if self.resolve_manager is not None:
            league = remap_managers(league, self.resolve_manager)
        self._leagues[league.league_id] = league

    def store_nfl_data(self, nfl_data: NFLData) -> None:
        _write_json_with_backup(self.nfl_path, nfl_data.to_dict())
        self._nfl_data = nfl_data

    def clear(self) -> None:
        self._leagues.clear()
        self._nfl_data = None
