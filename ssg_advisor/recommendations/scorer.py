"""
Heuristic SSG scoring: converts one analysis (ecosystem, languages, size)
and one catalog entry into a scored candidate with a reasoning trail.

Score formula (weighted sum, range 0–1)
---------------------------------------
    total = (
        ecosystem_match   * 0.60   # home-ecosystem affinity
        + language_match  * 0.15   # any detected language the SSG natively fits
        + size_fit        * 0.20   # size-class curve from the catalog
        + popularity      * 0.05   # adoption bias
        + priority_match  * 0.05   # per-call priority hint, 0 without one
    )

Component explanations
----------------------
ecosystem_match (0–1):
    ``entry.ecosystem_affinity[ecosystem]``. 1.0 for the SSG's home
    ecosystem, 0.05–0.5 otherwise. Carries the largest weight, so a
    home-ecosystem SSG beats a foreign one of similar size fit.

language_match (0 or 1):
    1.0 if any detected language is in ``entry.languages``.

size_fit (0–1):
    ``entry.size_fit[size_class]``. Docusaurus scores 0.25 on tiny projects,
    so Eleventy wins a tiny JavaScript repository.

popularity (0–1):
    ``entry.popularity``.

priority_match (0 or 1):
    1.0 if the caller passed a priority hint found in ``entry.strengths``.
    The bonus sits on top of the base weights, so ``MAX_POSSIBLE_SCORE``
    covers only the four base components and a hinted total can exceed it;
    the confidence clamp absorbs that. Without a hint every score is the
    plain four-component sum.

Confidence
----------
    confidence = clamp(total / MAX_POSSIBLE_SCORE, 0, 1), rounded to 4 places.

All functions here are pure: no store, no I/O, no logging.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from ssg_advisor.recommendations.catalog import CatalogEntry
from ssg_advisor.taxonomy.ssg_taxonomy import Ecosystem, ProjectPriority, SizeClass

ECOSYSTEM_WEIGHT = 0.60
LANGUAGE_WEIGHT = 0.15
SIZE_WEIGHT = 0.20
POPULARITY_WEIGHT = 0.05
PRIORITY_WEIGHT = 0.05

MAX_POSSIBLE_SCORE = ECOSYSTEM_WEIGHT + LANGUAGE_WEIGHT + SIZE_WEIGHT + POPULARITY_WEIGHT

# Size fit below this is called out in the reasoning.
_POOR_SIZE_FIT = 0.5


@dataclass
class ScoreComponents:
    """All components of one candidate's score.

    Attributes:
        ecosystem_match:   0–1 affinity for the analysis ecosystem.
        language_match:    1.0 if any detected language fits, else 0.0.
        size_fit:          0–1 fit for the analysis size class.
        popularity:        0–1 adoption bias.
        matched_languages: Detected languages the SSG fits, sorted.
        priority_match:    1.0 if the priority hint is one of the SSG's strengths.
    """

    ecosystem_match:   float
    language_match:    float
    size_fit:          float
    popularity:        float
    matched_languages: list[str]
    priority_match:    float = 0.0

    @property
    def total(self) -> float:
        """Weighted total score (0–1 without a priority hint)."""
        return (
            self.ecosystem_match  * ECOSYSTEM_WEIGHT
            + self.language_match * LANGUAGE_WEIGHT
            + self.size_fit       * SIZE_WEIGHT
            + self.popularity     * POPULARITY_WEIGHT
            + self.priority_match * PRIORITY_WEIGHT
        )


def compute_score(
    entry:      CatalogEntry,
    ecosystem:  Ecosystem,
    languages:  Iterable[str],
    size_class: SizeClass,
    priority:   Optional[ProjectPriority] = None,
) -> ScoreComponents:
    """Compute all score components for one catalog entry.

    Args:
        entry:      Catalog entry being scored.
        ecosystem:  Resolved analysis ecosystem.
        languages:  Detected languages (lowercase).
        size_class: Analysis size bucket.
        priority:   Optional per-call priority hint.

    Returns:
        ScoreComponents with all fields populated.
    """
    matched = sorted(set(languages) & entry.languages)
    return ScoreComponents(
        ecosystem_match=entry.ecosystem_affinity.get(ecosystem, 0.0),
        language_match=1.0 if matched else 0.0,
        size_fit=entry.size_fit.get(size_class, 0.0),
        popularity=entry.popularity,
        matched_languages=matched,
        priority_match=1.0 if priority is not None and priority in entry.strengths else 0.0,
    )


def score_to_confidence(score: float) -> float:
    """Normalize a raw score into a [0, 1] confidence."""
    return round(_clamp(score / MAX_POSSIBLE_SCORE, 0.0, 1.0), 4)


def build_reasoning(
    entry:       CatalogEntry,
    components:  ScoreComponents,
    ecosystem:   Ecosystem,
    size_class:  SizeClass,
    total_files: int,
    priority:    Optional[ProjectPriority] = None,
) -> list[str]:
    """Assemble the ordered explanation for a recommended SSG.

    The first entry always names the ecosystem, the size class and the SSG,
    e.g. ``"python ecosystem, small project (40 files): mkdocs is a native fit"``.

    Returns:
        Non-empty list of reasoning strings.
    """
    ssg = entry.ssg.value
    fit = "a native fit" if entry.primary_ecosystem == ecosystem else "the closest fit"
    reasons: list[str] = [
        f"{ecosystem.value} ecosystem, {size_class.value} project "
        f"({total_files} files): {ssg} is {fit}"
    ]

    if components.matched_languages:
        reasons.append(
            f"Detected languages supported by {ssg}: {', '.join(components.matched_languages)}"
        )

    if components.size_fit < _POOR_SIZE_FIT:
        reasons.append(f"{ssg} is a weaker fit for {size_class.value} projects")

    if priority is not None and components.priority_match:
        reasons.append(f"{ssg} suits a {priority.value} priority")

    reasons.extend(entry.pros)
    return reasons


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
