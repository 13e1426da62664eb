from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from .config import COLUMN_TYPES, MEDIAN_DEFAULT, SCOPE_PLAYOFFS, SCOPE_POSTSEASON, SCOPE_TOILET_BOWL
from .models import FantasyRecord, RecordColumn

PAGE_SIZES = (5, 10, 20, 50, 100)
DEFAULT_PAGE_SIZE = 5

POSTSEASON_SCOPES = frozenset({SCOPE_PLAYOFFS, SCOPE_TOILET_BOWL, SCOPE_POSTSEASON})


@dataclass(slots=True)
class Page:
    entries: list[dict[str, Any]] = field(default_factory=list)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_pages: int = 0
    first_position: int = 1


def format_number(value: float, precision: int | None, prefix: str = "", suffix: str = "") -> str:
    digits = precision or 0
    return f"{prefix}{value:,.{digits}f}{suffix}"


def format_cell(column: RecordColumn, entry: dict[str, Any]) -> str:
    if column.type not in COLUMN_TYPES:
        raise ValueError(f"Unknown column type: {column.type}")
    value = entry.get(column.key)
    if column.type == "string" or value is None:
        text = str(value)
    elif column.type == "number":
        text = format_number(value, column.decimal_precision)
    elif column.type == "currency":
        text = format_number(value, column.decimal_precision, prefix="$")
    else:
        text = format_number(value * 100, column.decimal_precision, suffix="%")

    hint = entry.get(column.hint_key) if column.hint_key else None
    if hint:
        return f"{text} ({hint})"
    return text


def format_row(record: FantasyRecord, entry: dict[str, Any]) -> dict[str, str]:
    return {column.key: format_cell(column, entry) for column in record.columns}


def record_leagues(record: FantasyRecord) -> list[str]:
    """Season ids that have their own rows, first-seen order."""
    return list(dict.fromkeys(entry["league"] for entry in record.entries if entry.get("league")))


def record_scopes(record: FantasyRecord) -> list[str]:
    return sorted({entry["scope"] for entry in record.entries if entry.get("scope")})


def filter_entries(
    record: FantasyRecord,
    league: str | None = None,
    scope: str | None = None,
    median_method: str | None = None,
) -> list[dict[str, Any]]:
    """Rows matching the requested season, time scope and median policy.

    Leaving a filter unset selects the aggregate rows when the record has
    them (career records carry one row per season plus a ``None`` row that
    sums them), otherwise every row.
    """
    entries = record.entries

    if league is not None:
        entries = [e for e in entries if e.get("league") == league]
    elif any(not e.get("league") for e in entries):
        entries = [e for e in entries if not e.get("league")]

    if scope == SCOPE_POSTSEASON:
        entries = [e for e in entries if e.get("scope") in POSTSEASON_SCOPES]
    elif scope is not None:
        entries = [e for e in entries if e.get("scope") == scope]
    elif any(not e.get("scope") for e in entries):
        entries = [e for e in entries if not e.get("scope")]

    if any(e.get("median_method") for e in entries):
        wanted = median_method or MEDIAN_DEFAULT
        entries = [e for e in entries if e.get("median_method") == wanted]

    return entries


def paginate(
    entries: list[dict[str, Any]],
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    display_all: bool = False,
    max_entries: int | None = None,
) -> Page:
    if page < 1:
        raise ValueError(f"Page must be at least 1, got {page}")
    if page_size not in PAGE_SIZES:
        raise ValueError(f"Page size must be one of {PAGE_SIZES}, got {page_size}")
    if max_entries is not None:
        entries = entries[:max_entries]

    if display_all:
        return Page(entries=list(entries), page=1, page_size=len(entries), total_pages=1, first_position=1)

    start = (page - 1) * page_size
    return Page(
        entries=entries[start : start + page_size],
        page=page,
        page_size=page_size,
        total_pages=math.ceil(len(entries) / page_size),
        first_position=start + 1,
    )
