from __future__ import annotations

import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .app import GroupReport, build_group_report, report_to_dict
from .config import MEDIAN_METHODS, RECORD_SCOPES
from .display import DEFAULT_PAGE_SIZE, filter_entries, format_row, paginate, record_leagues, record_scopes
from .errors import DataUnavailableError, FantasyDataError, MissingDataError
from .models import FantasyRecord
from .providers import ConfigProvider, LeagueDataProvider
from .records import find_definition, generate_record

logger = logging.getLogger(__name__)


class RecordQuery(BaseModel):
    record: str
    league: str | None = None
    scope: str | None = None
    median_method: str | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


def default_data_root() -> Path:
    configured = os.environ.get("FANTASY_RECORDS_DATA")
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parents[2]


class RecordBookService:
    def __init__(self, data_root: str | Path | None = None) -> None:
        self.data_root = Path(data_root) if data_root is not None else default_data_root()
        self.config_provider = ConfigProvider(self.data_root / "config.json")
        self.data_provider = LeagueDataProvider(self.data_root / "cache", resolve_manager=self.resolve_manager)
        self._reports: dict[str, GroupReport] = {}
        self._lock = Lock()

    def reload(self) -> dict[str, Any]:
        self.config_provider.clear()
        self.data_provider.clear()
        dropped = len(self._reports)
        self._reports.clear()
        logger.info("Cleared %d cached reports", dropped)
        return {"ok": True, "dropped_reports": dropped}

    def resolve_manager(self, external_id: str) -> str:
        return self.config_provider.resolve_manager(external_id)

    def config(self) -> dict[str, Any]:
        return self.config_provider.load().to_dict()

    def league(self, league_id: str) -> dict[str, Any]:
        return self.data_provider.load_league(league_id).to_dict()

    def nfl(self) -> dict[str, Any]:
        return self.data_provider.load_nfl_data().to_dict()

    def report(self, group_name: str) -> GroupReport:
        cached = self._reports.get(group_name)
        if cached is not None:
            return cached
        group = self.config_provider.group(group_name)
        leagues = self.data_provider.load_group(group)
        report = build_group_report(group, leagues, self.data_provider.load_nfl_data())
        self._reports[group_name] = report
        logger.info("Built record book for %s", group_name)
        return report

    def _record(self, group_name: str, record_name: str) -> FantasyRecord:
        report = self.report(group_name)
        for category in report.records:
            for record in category.children:
                if record.name == record_name:
                    return record
        # Not in the cached catalog output; the definition may still exist.
        definition = find_definition(record_name)
        if definition.is_available is not None and not definition.is_available(report.group):
            raise MissingDataError(f"Record '{record_name}' is not available for group '{group_name}'")
        return generate_record(
            definition,
            report.group,
            self.data_provider.load_group(report.group),
            self.data_provider.load_nfl_data(),
        )

    def query_record(self, group_name: str, query: RecordQuery) -> dict[str, Any]:
        if query.scope is not None and query.scope not in RECORD_SCOPES:
            raise ValueError(f"Unknown scope '{query.scope}'")
        if query.median_method is not None and query.median_method not in MEDIAN_METHODS:
            raise ValueError(f"Unknown median method '{query.median_method}'")

        record = self._record(group_name, query.record)
        entries = filter_entries(record, league=query.league, scope=query.scope, median_method=query.median_method)
        page = paginate(
            entries,
            page=query.page,
            page_size=query.page_size,
            display_all=record.display_all,
            max_entries=record.max_entries,
        )
        return {
            "name": record.name,
            "category": record.category,
            "data_available_from_year": record.data_available_from_year,
            "columns": [{"key": c.key, "title": c.title, "type": c.type} for c in record.columns],
            "leagues": record_leagues(record),
            "scopes": record_scopes(record),
            "page": page.page,
            "page_size": page.page_size,
            "total_pages": page.total_pages,
            "total_entries": len(entries) if record.max_entries is None else min(len(entries), record.max_entries),
            "rows": [
                {
                    "position": page.first_position + offset,
                    "key": entry[record.key_field],
                    "cells": format_row(record, entry),
                }
                for offset, entry in enumerate(page.entries)
            ],
        }


def _not_found(exc: FantasyDataError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


service = RecordBookService()
app = FastAPI(title="Fantasy Records API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/config")
def config() -> dict[str, Any]:
    with service._lock:
        try:
            return service.config()
        except DataUnavailableError as exc:
            raise _not_found(exc) from exc


@app.get("/api/leagues/{league_id}")
def league(league_id: str) -> dict[str, Any]:
    with service._lock:
        try:
            return service.league(league_id)
        except DataUnavailableError as exc:
            raise _not_found(exc) from exc


@app.get("/api/nfl")
def nfl() -> dict[str, Any]:
    with service._lock:
        try:
            return service.nfl()
        except DataUnavailableError as exc:
            raise _not_found(exc) from exc


@app.get("/api/groups/{group}/records")
def group_records(group: str) -> dict[str, Any]:
    with service._lock:
        try:
            report = service.report(group)
        except (DataUnavailableError, MissingDataError) as exc:
            raise _not_found(exc) from exc
        return {"group": group, "records": [category.to_dict() for category in report.records]}


@app.post("/api/groups/{group}/records/query")
def query_records(group: str, payload: RecordQuery) -> dict[str, Any]:
    with service._lock:
        try:
            return service.query_record(group, payload)
        except (DataUnavailableError, MissingDataError) as exc:
            raise _not_found(exc) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/api/groups/{group}/manager-matchups")
def manager_matchups(group: str) -> dict[str, Any]:
    with service._lock:
        try:
            return service.report(group).manager_matchups.to_dict()
        except (DataUnavailableError, MissingDataError) as exc:
            raise _not_found(exc) from exc


@app.get("/api/groups/{group}/trophies")
def trophies(group: str) -> dict[str, Any]:
    with service._lock:
        try:
            return service.report(group).trophies.to_dict()
        except (DataUnavailableError, MissingDataError) as exc:
            raise _not_found(exc) from exc


@app.get("/api/groups/{group}/report")
def group_report(group: str) -> dict[str, Any]:
    with service._lock:
        try:
            return report_to_dict(service.report(group))
        except (DataUnavailableError, MissingDataError) as exc:
            raise _not_found(exc) from exc


@app.post("/api/reload")
def reload() -> dict[str, Any]:
    with service._lock:
        return service.reload()
