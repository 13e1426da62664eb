from __future__ import annotations


class FantasyDataError(Exception):
    """Base class for everything the record book raises on bad or absent data."""


class DataUnavailableError(FantasyDataError):
    """A provider could not supply a season, the NFL directory, or the config."""

    def __init__(self, message: str, league_id: str | None = None) -> None:
        super().__init__(message)
        self.league_id = league_id


class MissingDataError(FantasyDataError, LookupError):
    """An id referenced by the supplied data has no entry in the maps it points into."""
