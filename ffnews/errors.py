"""Exceptions raised by the ingestion pipeline."""

from __future__ import annotations


class FFNewsError(Exception):
    """Base class for run-level failures."""


class ConfigError(FFNewsError):
    """A configuration value could not be interpreted."""


class FetchFailure(FFNewsError):
    """A single feed could not be downloaded or did not have the expected shape."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class CombinedFetchFailure(FFNewsError):
    """Both the primary and the fallback feed failed."""

    def __init__(self, primary: FetchFailure, secondary: FetchFailure) -> None:
        super().__init__(f"primary failed ({primary}); fallback failed ({secondary})")
        self.primary = primary
        self.secondary = secondary


class PublishFailure(FFNewsError):
    """The snapshot could not be written or moved into place."""
