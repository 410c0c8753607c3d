"""
Static SSG catalog: the compiled-in facts the scorer weighs.

Each ``CatalogEntry`` carries:
  - ``ecosystem_affinity``: 0–1 weight per ``Ecosystem``. 1.0 for the
    generator's home ecosystem; low values elsewhere.
  - ``languages``: lowercase language names that signal a good fit.
  - ``size_fit``: 0–1 weight per ``SizeClass``. Docusaurus is penalised on
    tiny projects; Jekyll and Eleventy are penalised on large ones.
  - ``popularity``: 0–1 community/adoption bias.
  - ``priority``: unique tie-break rank, 1 first. Only used when two
    candidates score exactly the same.
  - ``strengths``: the ``ProjectPriority`` values the generator serves
    well; matched against a caller's per-call priority hint.

The ``CATALOG`` tuple is the integrity contract:
  - Every ``SsgId`` has exactly one entry.
  - Every entry covers every ``Ecosystem`` and every ``SizeClass``.
  - Priorities are unique.

Run ``tests/test_recommendations/test_catalog.py`` to verify this contract.
"""

from __future__ import annotations

from dataclasses import dataclass

from ssg_advisor.taxonomy.ssg_taxonomy import Ecosystem, ProjectPriority, SizeClass, SsgId

E = Ecosystem
S = SizeClass
P = ProjectPriority


@dataclass(frozen=True)
class CatalogEntry:
    """Static scoring facts for one SSG.

    Attributes:
        ssg:                Catalog key.
        display_name:       Human-readable name.
        primary_ecosystem:  The generator's home ecosystem.
        ecosystem_affinity: Weight (0–1) per analysis ecosystem.
        languages:          Languages that indicate a natural fit.
        size_fit:           Weight (0–1) per project size class.
        popularity:         Adoption bias (0–1).
        priority:           Tie-break rank, lower wins.
        pros:               Strengths shown to users.
        cons:               Weaknesses shown to users.
        strengths:          Priorities the generator serves well.
    """

    ssg:                SsgId
    display_name:       str
    primary_ecosystem:  Ecosystem
    ecosystem_affinity: dict[Ecosystem, float]
    languages:          frozenset[str]
    size_fit:           dict[SizeClass, float]
    popularity:         float
    priority:           int
    pros:               tuple[str, ...]
    cons:               tuple[str, ...]
    strengths:          frozenset[ProjectPriority] = frozenset()


CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        ssg=SsgId.DOCUSAURUS,
        display_name="Docusaurus",
        primary_ecosystem=E.JAVASCRIPT,
        ecosystem_affinity={E.JAVASCRIPT: 1.0, E.PYTHON: 0.1, E.RUBY: 0.05, E.GO: 0.05, E.OTHER: 0.3},
        languages=frozenset({"javascript", "typescript", "jsx", "tsx", "mdx"}),
        size_fit={S.TINY: 0.25, S.SMALL: 0.8, S.MEDIUM: 1.0, S.LARGE: 1.0},
        popularity=1.0,
        priority=1,
        pros=("Versioning and i18n built in", "React components in docs", "Active community"),
        cons=("Heavy toolchain for small projects", "Requires Node.js"),
        strengths=frozenset({P.FEATURES}),
    ),
    CatalogEntry(
        ssg=SsgId.MKDOCS,
        display_name="MkDocs",
        primary_ecosystem=E.PYTHON,
        ecosystem_affinity={E.PYTHON: 1.0, E.JAVASCRIPT: 0.1, E.RUBY: 0.1, E.GO: 0.1, E.OTHER: 0.4},
        languages=frozenset({"python"}),
        size_fit={S.TINY: 0.9, S.SMALL: 1.0, S.MEDIUM: 0.9, S.LARGE: 0.6},
        popularity=0.8,
        priority=2,
        pros=("Simple Markdown setup", "Python-native tooling", "Material theme"),
        cons=("Less flexible than Docusaurus", "Limited component support"),
        strengths=frozenset({P.SIMPLICITY}),
    ),
    CatalogEntry(
        ssg=SsgId.HUGO,
        display_name="Hugo",
        primary_ecosystem=E.GO,
        ecosystem_affinity={E.GO: 1.0, E.JAVASCRIPT: 0.2, E.PYTHON: 0.2, E.RUBY: 0.2, E.OTHER: 0.5},
        languages=frozenset({"go"}),
        size_fit={S.TINY: 0.6, S.SMALL: 0.8, S.MEDIUM: 1.0, S.LARGE: 1.0},
        popularity=0.9,
        priority=3,
        pros=("Extremely fast builds", "Single binary, no runtime dependencies"),
        cons=("Steeper learning curve", "Go templating may be unfamiliar"),
        strengths=frozenset({P.PERFORMANCE}),
    ),
    CatalogEntry(
        ssg=SsgId.JEKYLL,
        display_name="Jekyll",
        primary_ecosystem=E.RUBY,
        ecosystem_affinity={E.RUBY: 1.0, E.JAVASCRIPT: 0.1, E.PYTHON: 0.1, E.GO: 0.05, E.OTHER: 0.3},
        languages=frozenset({"ruby", "liquid"}),
        size_fit={S.TINY: 1.0, S.SMALL: 0.9, S.MEDIUM: 0.6, S.LARGE: 0.3},
        popularity=0.7,
        priority=4,
        pros=("Native GitHub Pages support", "Mature plugin ecosystem"),
        cons=("Slow builds on large sites", "Requires Ruby"),
        strengths=frozenset({P.SIMPLICITY}),
    ),
    CatalogEntry(
        ssg=SsgId.ELEVENTY,
        display_name="Eleventy",
        primary_ecosystem=E.JAVASCRIPT,
        ecosystem_affinity={E.JAVASCRIPT: 0.8, E.PYTHON: 0.1, E.RUBY: 0.1, E.GO: 0.1, E.OTHER: 0.3},
        languages=frozenset({"javascript", "typescript", "nunjucks", "liquid"}),
        size_fit={S.TINY: 1.0, S.SMALL: 1.0, S.MEDIUM: 0.8, S.LARGE: 0.5},
        popularity=0.6,
        priority=5,
        pros=("Zero client-side JavaScript by default", "Flexible templating"),
        cons=("Fewer documentation features out of the box",),
        strengths=frozenset({P.SIMPLICITY, P.PERFORMANCE}),
    ),
)

_BY_ID: dict[SsgId, CatalogEntry] = {entry.ssg: entry for entry in CATALOG}


def get_entry(ssg: SsgId) -> CatalogEntry:
    """Return the catalog entry for ``ssg``."""
    return _BY_ID[ssg]


def entries_by_priority() -> list[CatalogEntry]:
    """All entries in tie-break order."""
    return sorted(CATALOG, key=lambda e: e.priority)
