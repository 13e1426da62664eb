from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .errors import FantasyDataError
from .manager_matchups import compute_manager_matchups
from .models import (
    League,
    LeagueConfig,
    LeagueDefinition,
    ManagerMatchupData,
    NFLData,
    RecordCategory,
    TrophyData,
)
from .providers import LeagueDataProvider
from .records import generate_records
from .trophies import compute_trophies

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GroupReport:
    group: LeagueDefinition
    records: list[RecordCategory]
    manager_matchups: ManagerMatchupData
    trophies: TrophyData


def build_group_report(group: LeagueDefinition, leagues: dict[str, League], nfl_data: NFLData) -> GroupReport:
    return GroupReport(
        group=group,
        records=generate_records(group, leagues, nfl_data),
        manager_matchups=compute_manager_matchups(group, leagues),
        trophies=compute_trophies(group, leagues, nfl_data),
    )


def build_reports(config: LeagueConfig, provider: LeagueDataProvider) -> dict[str, GroupReport]:
    nfl_data = provider.load_nfl_data()
    reports: dict[str, GroupReport] = {}
    for group in config.leagues:
        try:
            leagues = provider.load_group(group)
            reports[group.name] = build_group_report(group, leagues, nfl_data)
        except FantasyDataError:
            logger.exception("Could not build the record book for %s", group.name)
            raise
        logger.info("Built record book for %s (%d seasons)", group.name, len(group.years))
    return reports


def report_to_dict(report: GroupReport) -> dict[str, Any]:
    return {
        "group": report.group.to_dict(),
        "records": [category.to_dict() for category in report.records],
        "manager_matchups": report.manager_matchups.to_dict(),
        "trophies": report.trophies.to_dict(),
    }
