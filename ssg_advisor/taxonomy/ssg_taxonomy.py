"""
Closed enumerations for SSG recommendation.

Four vocabularies are shared across the whole package:
  - ``SsgId``           : the static site generators the advisor can recommend.
  - ``Ecosystem``       : the primary package ecosystem detected by the analyzer.
  - ``SizeClass``       : a coarse bucket derived from the project's file count.
  - ``ProjectPriority`` : what a caller values most when asking for a
                          recommendation (a per-call hint, never stored).

Raw strings coming from outside (analyzer output, CLI flags, imported JSON)
must pass through ``parse_ssg()`` / ``parse_ecosystem()`` before they reach
scoring or preference storage, so "unknown SSG" never exists past a boundary.

This module has NO imports from any other ``ssg_advisor`` package.
"""

from enum import StrEnum
from typing import Optional


class SsgId(StrEnum):
    """A static site generator known to the catalog."""

    DOCUSAURUS = "docusaurus"
    """React-based documentation framework (Meta)."""

    HUGO = "hugo"
    """Single Go binary; very fast builds, Go templating."""

    ELEVENTY = "eleventy"
    """Lightweight JavaScript SSG with minimal client-side code."""

    MKDOCS = "mkdocs"
    """Markdown-first Python documentation generator."""

    JEKYLL = "jekyll"
    """Ruby SSG with native GitHub Pages support."""


class Ecosystem(StrEnum):
    """Primary language/package ecosystem of an analyzed project."""

    JAVASCRIPT = "javascript"
    PYTHON = "python"
    RUBY = "ruby"
    GO = "go"
    OTHER = "other"


class SizeClass(StrEnum):
    """Project size bucket derived from total file count."""

    TINY = "tiny"
    """Fewer than 20 files."""

    SMALL = "small"
    """20 – 99 files."""

    MEDIUM = "medium"
    """100 – 999 files."""

    LARGE = "large"
    """1000 files or more."""


class ProjectPriority(StrEnum):
    """What the caller values most in a generator."""

    SIMPLICITY = "simplicity"
    FEATURES = "features"
    PERFORMANCE = "performance"


# Analyzer spellings that map onto a canonical ecosystem.
_ECOSYSTEM_ALIASES: dict[str, Ecosystem] = {
    "typescript": Ecosystem.JAVASCRIPT,
    "node":       Ecosystem.JAVASCRIPT,
    "nodejs":     Ecosystem.JAVASCRIPT,
    "golang":     Ecosystem.GO,
}

# Upper file-count bound (exclusive) for each size class; LARGE is open-ended.
SIZE_CLASS_BOUNDS: tuple[tuple[SizeClass, int], ...] = (
    (SizeClass.TINY,   20),
    (SizeClass.SMALL,  100),
    (SizeClass.MEDIUM, 1000),
)


def parse_ssg(value: str) -> Optional[SsgId]:
    """Return the ``SsgId`` for ``value`` (case-insensitive), or ``None``."""
    try:
        return SsgId(value.strip().lower())
    except (AttributeError, ValueError):
        return None


def parse_ecosystem(value: Optional[str]) -> Optional[Ecosystem]:
    """Return the canonical ``Ecosystem`` for an analyzer string, or ``None``.

    Accepts the enumeration values plus a few common aliases
    (``typescript`` and ``node`` map to ``javascript``).
    """
    if value is None:
        return None
    key = value.strip().lower()
    if not key:
        return None
    if key in _ECOSYSTEM_ALIASES:
        return _ECOSYSTEM_ALIASES[key]
    try:
        return Ecosystem(key)
    except ValueError:
        return None


def parse_priority(value: Optional[str]) -> Optional[ProjectPriority]:
    """Return the ``ProjectPriority`` for ``value`` (case-insensitive), or ``None``."""
    if value is None:
        return None
    try:
        return ProjectPriority(value.strip().lower())
    except (AttributeError, ValueError):
        return None


def size_class_for(total_files: int) -> SizeClass:
    """Bucket a file count into a ``SizeClass``."""
    for size_class, upper in SIZE_CLASS_BOUNDS:
        if total_files < upper:
            return size_class
    return SizeClass.LARGE
