"""
Exception hierarchy for the SSG advisor.

Every error the core raises on purpose derives from ``SsgAdvisorError`` so
callers (the CLI, a protocol server) can catch the family in one place.
"""

from __future__ import annotations


class SsgAdvisorError(Exception):
    """Base class for all advisor errors."""


class AnalysisNotFound(SsgAdvisorError):
    """Raised when an analysis id does not resolve in the store."""

    def __init__(self, analysis_id: str) -> None:
        super().__init__(f"Analysis not found: '{analysis_id}'.")
        self.analysis_id = analysis_id


class InvalidAnalysis(SsgAdvisorError):
    """Raised when an analysis lacks a recognizable primary ecosystem."""


class InvalidPreference(SsgAdvisorError):
    """Raised when a preference update names an unknown or duplicate SSG."""


class StoreError(SsgAdvisorError):
    """Raised when the backing store fails for any reason other than a missing key."""
