"""
Command-line front end for the SSG advisor.

Every command loads ``AppConfig``, sets up logging from its ``[logging]``
table, builds what it needs (store, orchestrator) and prints its result on
stdout. Results another tool might consume, such as recommendations and
profiles, are printed as JSON.

Failures are reported as ``[ERROR] <message>`` on stderr with exit code 1.

Examples::

    ssg-advisor init-db
    ssg-advisor import-analysis --file analysis.json
    ssg-advisor recommend <analysis-id> --user alice
    ssg-advisor recommend <analysis-id> --priority performance --ecosystem go
    ssg-advisor record-usage alice hugo
    ssg-advisor prefs update alice --ssg hugo --ssg eleventy --auto-apply
    ssg-advisor prefs history alice
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="ssg-advisor",
    help="Static site generator advisor: recommendations and user preferences.",
    add_completion=False,
)

prefs_app = typer.Typer(
    name="prefs",
    help="Inspect and administer per-user SSG preferences.",
    add_completion=False,
)
app.add_typer(prefs_app, name="prefs")

_CONFIG_OPTION_HELP = "TOML config file (defaults to config/default.toml)."


# ── Helpers ───────────────────────────────────────────────────────────────────

def _fail(exc: Exception) -> typer.Exit:
    typer.echo(f"[ERROR] {exc}", err=True)
    return typer.Exit(code=1)


def _load_config_or_exit(config_path: Optional[str] = None):
    """Return the merged ``AppConfig`` or exit 1 with the reason on stderr."""
    from pydantic import ValidationError

    from ssg_advisor.config import load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        raise _fail(exc)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config) -> None:
    from ssg_advisor.utils.logging import configure_logging

    configure_logging(config.logging)


def _orchestrator_or_exit(config_path: Optional[str]):
    """Config, logging and a ready orchestrator, or exit 1."""
    from ssg_advisor.errors import SsgAdvisorError
    from ssg_advisor.orchestrator import build_orchestrator

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    try:
        return build_orchestrator(config)
    except SsgAdvisorError as exc:
        raise _fail(exc)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None, "--db-path", help="Database file to initialize instead of the configured one."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Create the knowledge graph tables and apply pending migrations.

    Re-running is harmless; existing rows are left alone and reported.
    """
    import sqlite3

    from ssg_advisor.db.connection import get_connection
    from ssg_advisor.db.migrations import run_migrations
    from ssg_advisor.db.repositories.base import BaseRepository
    from ssg_advisor.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    db = config.database
    path = db_path or db.db_path

    try:
        with get_connection(path, wal_mode=db.wal_mode, busy_timeout_ms=db.busy_timeout_ms) as conn:
            apply_schema(conn)
            applied = run_migrations(conn)
            repo = BaseRepository(conn)
            counts = {table: repo.count(table) for table in ALL_TABLE_NAMES}
    except (sqlite3.Error, OSError) as exc:
        raise _fail(exc)

    typer.echo(f"Database: {path}")
    for table, n in counts.items():
        typer.echo(f"  {table:<22} {n} row(s)")
    typer.echo(f"  New migrations: {applied}")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
    show_full: bool = typer.Option(False, "--full", help="Also dump every field as JSON."),
) -> None:
    """Load the configuration and summarize the effective settings."""
    config = _load_config_or_exit(config_path)

    summary = {
        "Store backend": config.database.backend,
        "Database path": config.database.db_path,
        "Confidence boost": config.recommendation.confidence_boost,
        "Max alternatives": config.recommendation.max_alternatives,
        "Log level": config.logging.level,
        "Debug mode": config.debug,
    }
    for label, value in summary.items():
        typer.echo(f"  {label + ':':<17} {value}")

    if show_full:
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("[OK] Config valid.")


@app.command("import-analysis")
def import_analysis(
    analysis_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="JSON file holding one analysis object or an array of them.",
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Store analyzer output so it can be referenced by id.

    Uses UPSERT semantics: an analysis with an existing id is replaced.
    Prints the stored id(s), one per line.
    """
    from pydantic import ValidationError

    from ssg_advisor.errors import SsgAdvisorError
    from ssg_advisor.models.analysis import AnalysisRecord

    path = Path(analysis_file)
    if not path.exists():
        typer.echo(f"[ERROR] Analysis file not found: {path}", err=True)
        raise typer.Exit(code=1)

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)

    raw_items = raw if isinstance(raw, list) else [raw]
    records: list[AnalysisRecord] = []
    errors: list[tuple[int, str]] = []
    for i, item in enumerate(raw_items):
        if not isinstance(item, dict):
            errors.append((i, "not a JSON object"))
            continue
        try:
            records.append(AnalysisRecord(**item))
        except ValidationError as exc:
            errors.append((i, str(exc)))

    if errors:
        typer.echo(f"[ERROR] {len(errors)} analysis record(s) failed validation:", err=True)
        for idx, msg in errors[:5]:
            typer.echo(f"  Record #{idx}: {msg}", err=True)
        if len(errors) > 5:
            typer.echo(f"  ... and {len(errors) - 5} more.", err=True)
        raise typer.Exit(code=1)

    orchestrator = _orchestrator_or_exit(config_path)
    try:
        ids = [orchestrator.store.upsert_analysis(r) for r in records]
    except SsgAdvisorError as exc:
        raise _fail(exc)

    for analysis_id in ids:
        typer.echo(analysis_id)


@app.command("recommend")
def recommend(
    analysis_id: str = typer.Argument(..., help="Id of a stored analysis."),
    user_id: Optional[str] = typer.Option(
        None,
        "--user",
        "-u",
        help="Personalize with this user's preference profile.",
    ),
    priority: Optional[str] = typer.Option(
        None,
        "--priority",
        help="Favour SSGs strong in: simplicity, features or performance.",
    ),
    ecosystem: Optional[str] = typer.Option(
        None,
        "--ecosystem",
        help="Score as this ecosystem (javascript, python, ruby, go, any).",
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Recommend an SSG for a stored analysis and print it as JSON."""
    from pydantic import ValidationError

    from ssg_advisor.errors import SsgAdvisorError
    from ssg_advisor.models.recommendation import RecommendationHints

    try:
        hints = RecommendationHints(priority=priority, ecosystem=ecosystem)
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        typer.echo(f"[ERROR] Invalid hint: {messages}", err=True)
        raise typer.Exit(code=1)

    orchestrator = _orchestrator_or_exit(config_path)
    try:
        final = orchestrator.recommend(analysis_id, user_id=user_id, hints=hints)
    except SsgAdvisorError as exc:
        raise _fail(exc)

    typer.echo(json.dumps(final.to_record(), indent=2))


@app.command("record-usage")
def record_usage(
    user_id: str = typer.Argument(..., help="User id."),
    ssg: str = typer.Argument(..., help="SSG that was used (e.g. hugo)."),
    failed: bool = typer.Option(
        False,
        "--failed",
        help="Record the use as unsuccessful (deployment failed).",
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Count one use of an SSG and reorder the user's preferences by usage."""
    from ssg_advisor.errors import SsgAdvisorError

    orchestrator = _orchestrator_or_exit(config_path)
    try:
        profile = orchestrator.preferences.record_usage(user_id, ssg, success=not failed)
    except SsgAdvisorError as exc:
        raise _fail(exc)

    ranked = ", ".join(s.value for s in profile.preferred_ssgs)
    typer.echo(f"  Preferred SSGs: {ranked}")
    typer.echo("[OK] Usage recorded.")


# ── Preference administration ─────────────────────────────────────────────────

@prefs_app.command("show")
def prefs_show(
    user_id: str = typer.Argument(..., help="User id."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Print the user's profile as JSON (default profile if none is stored)."""
    from ssg_advisor.errors import SsgAdvisorError

    orchestrator = _orchestrator_or_exit(config_path)
    try:
        typer.echo(orchestrator.preferences.export_preferences(user_id))
    except SsgAdvisorError as exc:
        raise _fail(exc)


@prefs_app.command("update")
def prefs_update(
    user_id: str = typer.Argument(..., help="User id."),
    ssgs: Optional[list[str]] = typer.Option(
        None,
        "--ssg",
        help="Preferred SSG, most preferred first. Repeat for a ranked list.",
    ),
    clear_ssgs: bool = typer.Option(
        False,
        "--clear-ssgs",
        help="Empty the preferred list.",
    ),
    auto_apply: Optional[bool] = typer.Option(
        None,
        "--auto-apply/--no-auto-apply",
        help="Let the first preferred SSG override the heuristic choice.",
    ),
    style: Optional[str] = typer.Option(
        None, "--style", help="minimal | comprehensive | tutorial-heavy"
    ),
    expertise: Optional[str] = typer.Option(
        None, "--expertise", help="beginner | intermediate | advanced"
    ),
    technologies: Optional[list[str]] = typer.Option(
        None, "--tech", help="Preferred technology. Repeat for several."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Apply a partial update to the user's preferences."""
    from ssg_advisor.errors import SsgAdvisorError

    if clear_ssgs and ssgs:
        typer.echo("[ERROR] --ssg and --clear-ssgs are mutually exclusive.", err=True)
        raise typer.Exit(code=1)

    update: dict = {}
    if ssgs:
        update["preferred_ssgs"] = list(ssgs)
    elif clear_ssgs:
        update["preferred_ssgs"] = []
    if auto_apply is not None:
        update["auto_apply_preferences"] = auto_apply
    if style is not None:
        update["documentation_style"] = style
    if expertise is not None:
        update["expertise_level"] = expertise
    if technologies:
        update["preferred_technologies"] = list(technologies)

    if not update:
        typer.echo("[ERROR] Nothing to update; pass at least one option.", err=True)
        raise typer.Exit(code=1)

    orchestrator = _orchestrator_or_exit(config_path)
    try:
        profile = orchestrator.update_preferences(user_id, update)
    except SsgAdvisorError as exc:
        raise _fail(exc)

    typer.echo(profile.model_dump_json(by_alias=True, indent=2))
    typer.echo("[OK] Preferences updated.")


@prefs_app.command("reset")
def prefs_reset(
    user_id: str = typer.Argument(..., help="User id."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Replace the user's profile with the default profile."""
    from ssg_advisor.errors import SsgAdvisorError

    orchestrator = _orchestrator_or_exit(config_path)
    try:
        orchestrator.preferences.reset_preferences(user_id)
    except SsgAdvisorError as exc:
        raise _fail(exc)
    typer.echo("[OK] Preferences reset.")


@prefs_app.command("export")
def prefs_export(
    user_id: str = typer.Argument(..., help="User id."),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write to this file instead of stdout.",
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Export the user's profile as JSON."""
    from ssg_advisor.errors import SsgAdvisorError

    orchestrator = _orchestrator_or_exit(config_path)
    try:
        payload = orchestrator.preferences.export_preferences(user_id)
    except SsgAdvisorError as exc:
        raise _fail(exc)

    if output is None:
        typer.echo(payload)
        return

    out_path = Path(output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(payload, encoding="utf-8")
    typer.echo(f"[OK] Preferences exported to {out_path}.")


@prefs_app.command("import")
def prefs_import(
    user_id: str = typer.Argument(..., help="User id."),
    input_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="JSON file produced by 'prefs export'.",
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Replace the user's profile with an exported one (user ids must match)."""
    from ssg_advisor.errors import SsgAdvisorError

    path = Path(input_file)
    if not path.exists():
        typer.echo(f"[ERROR] Preferences file not found: {path}", err=True)
        raise typer.Exit(code=1)

    orchestrator = _orchestrator_or_exit(config_path)
    try:
        orchestrator.preferences.import_preferences(user_id, path.read_text(encoding="utf-8"))
    except SsgAdvisorError as exc:
        raise _fail(exc)
    typer.echo("[OK] Preferences imported.")


@prefs_app.command("history")
def prefs_history(
    user_id: str = typer.Argument(..., help="User id."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """List the SSGs the user has used, ranked by usage × success rate."""
    from ssg_advisor.errors import SsgAdvisorError

    orchestrator = _orchestrator_or_exit(config_path)
    try:
        recs = orchestrator.preferences.usage_recommendations(user_id)
    except SsgAdvisorError as exc:
        raise _fail(exc)

    if not recs:
        typer.echo("No usage recorded.")
        return
    for rec in recs:
        typer.echo(f"  {rec.ssg.value:<12} {rec.score:>6.2f}  {rec.reason}")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
