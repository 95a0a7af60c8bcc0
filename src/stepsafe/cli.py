"""
Command line interface for StepSafe.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .api import geocode_name, get_climate_data, mock_climate_for_city
from .config import AppConfig, ConfigError, load_config, resolve_data_dir
from .history import load_history
from .llm import resolve_llm_settings
from .pipeline import PipelineResult, execute_pipeline
from .report import generate_safety_advisory, risk_description
from .risk import ClimateData, RiskProfile, UserInput, analyze_risks, generate_checklist, generate_time_windows
from .web import ScaffoldReport, generate_site_structure

console = Console()
app = typer.Typer(help="Personal climate-health advisories: quick checks and daily reports.")
logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]
AGE_GROUPS = ("Child", "Adult", "Elderly")
ACTIVITY_LEVELS = ("Low", "Medium", "High")

_LEVEL_STYLES = {"Low": "green", "Medium": "yellow", "High": "dark_orange", "Extreme": "bold red"}


def _configure_logging(level_name: str) -> None:
    env_override = os.getenv("STEPSAFE_LOG_LEVEL")
    level_str = (env_override or level_name or "info").upper()
    if level_str not in {lvl.upper() for lvl in LOG_LEVELS}:
        level_str = "INFO"
    logging.basicConfig(
        level=getattr(logging, level_str, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Logging configured at %s", level_str)


def _resolve_config_path(value: Path) -> Path:
    """Ensure config path exists and return absolute path."""
    resolved = value.expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"No config file found at {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Config path must be a file, got directory: {resolved}")
    return resolved


def _load_config_or_exit(path: Path) -> AppConfig:
    try:
        return load_config(path)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _choice_callback(choices: Sequence[str], label: str):
    def _validate(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        for choice in choices:
            if value.strip().lower() == choice.lower():
                return choice
        raise typer.BadParameter(f"{label} must be one of: {', '.join(choices)}")

    return _validate


def _styled(level: str) -> str:
    return f"[{_LEVEL_STYLES.get(level, 'white')}]{level}[/]"


def _print_scaffold_report(report: ScaffoldReport) -> None:
    table = Table(title="Scaffold Summary")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in report.summary_rows():
        table.add_row(key, value)
    console.print(table)


def _print_conditions(city: str, climate: ClimateData, source: str) -> None:
    table = Table(title=f"Conditions for {city} ({source})")
    table.add_column("Factor")
    table.add_column("Value", justify="right")
    table.add_row("Temperature", f"{climate.temperature:g} °F")
    table.add_row("Humidity", f"{climate.humidity:g} %")
    table.add_row("UV index", f"{climate.uv_index:g}")
    table.add_row("AQI", f"{climate.aqi:g}")
    table.add_row("Rain probability", f"{climate.rain_probability:g} %")
    console.print(table)


def _print_risk_profile(profile: RiskProfile) -> None:
    risks = Table(title="Risk Profile")
    risks.add_column("Risk")
    risks.add_column("Level")
    risks.add_column("Explanation", overflow="fold")
    for risk in profile:
        risks.add_row(risk.name, _styled(risk.level), risk.explanation)
    console.print(risks)

    checklist = Table(title="Checklist")
    checklist.add_column("Recommendation")
    checklist.add_column("Details", overflow="fold")
    for item in generate_checklist(profile):
        checklist.add_row(item.recommendation, item.details)
    console.print(checklist)

    windows = Table(title="Time Windows")
    windows.add_column("Period")
    windows.add_column("Level")
    windows.add_column("Reason", overflow="fold")
    for window in generate_time_windows(profile):
        style = "green" if window.level == "Safer" else "bold red"
        windows.add_row(window.period, f"[{style}]{window.level}[/]", window.reason)
    console.print(windows)


def _print_pipeline_result(result: PipelineResult) -> None:
    table = Table(title="Daily Reports")
    table.add_column("Profile")
    table.add_column("Score", justify="right")
    table.add_column("Risk")
    table.add_column("Source")
    table.add_column("Dashboard", overflow="fold")
    for item in result.results:
        score = item.record.personal_health_risk_score
        source = item.report.source + (" (default data)" if item.used_fallback_data else "")
        table.add_row(
            item.profile_id,
            str(score),
            risk_description(score),
            source,
            str(item.destination) if item.destination else "-",
        )
    console.print(table)
    for profile_id in result.skipped:
        console.print(f"[bold yellow]Skipped[/] {profile_id}: location could not be resolved.")


@app.callback(invoke_without_command=True)
def _root_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show stepsafe version and exit.",
        is_flag=True,
    ),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        help="Logging level (critical, error, warning, info, debug).",
        show_default=True,
        case_sensitive=False,
    ),
) -> None:
    """
    Default command when no subcommand is selected.
    """
    _configure_logging(log_level)

    if version:
        console.print(f"[bold green]stepsafe[/] {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(
            "[bold yellow]stepsafe[/] is ready. Try [cyan]stepsafe check --city Phoenix[/] "
            "or [cyan]stepsafe report --config profiles.toml[/].",
        )


@app.command()
def check(
    city: str = typer.Option(..., "--city", help="City to check."),
    live: bool = typer.Option(
        False,
        "--live",
        help="Geocode the city and fetch real conditions instead of the simulated ones.",
    ),
    age_group: Optional[str] = typer.Option(
        None,
        "--age-group",
        help="Child, Adult or Elderly.",
        callback=_choice_callback(AGE_GROUPS, "Age group"),
    ),
    activity_level: Optional[str] = typer.Option(
        None,
        "--activity-level",
        help="Low, Medium or High.",
        callback=_choice_callback(ACTIVITY_LEVELS, "Activity level"),
    ),
    llm: bool = typer.Option(False, "--llm", help="Write the advisory with an LLM."),
    model: Optional[str] = typer.Option(None, "--model", help="LLM to use with --llm (e.g. gpt-4o-mini)."),
) -> None:
    """
    Quick check: risk profile, checklist, time windows and advisory for a city.
    """
    if not city.strip():
        raise typer.BadParameter("City must not be empty.", param_hint="--city")
    user_input = UserInput(city=city.strip(), age_group=age_group, activity_level=activity_level)

    if live:
        data_dir = resolve_data_dir()
        geocode = geocode_name(user_input.city, cache_path=data_dir / "cache" / "geocode" / "search_cache.json")
        if geocode is None:
            console.print(f"[bold red]Could not locate[/] {user_input.city}.")
            raise typer.Exit(code=1)
        climate = get_climate_data(geocode.latitude, geocode.longitude, cache_dir=data_dir / "cache" / "climate")
        _print_conditions(geocode.name, climate, "live")
    else:
        climate = mock_climate_for_city(user_input.city)
        _print_conditions(user_input.city, climate, "simulated")

    profile = analyze_risks(climate, user_input)
    _print_risk_profile(profile)

    settings = None
    if llm:
        try:
            settings = resolve_llm_settings(override_choice=model)
        except RuntimeError as exc:
            console.print(f"[bold yellow]LLM unavailable:[/] {exc}")
    advisory = generate_safety_advisory(profile, settings=settings)
    console.print("[bold]Safety advisory[/]")
    console.print(advisory)


@app.command()
def report(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to the profile configuration TOML file.",
        callback=_resolve_config_path,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Generate reports without writing history or dashboards.",
    ),
    no_llm: bool = typer.Option(
        False,
        "--no-llm",
        help="Skip the LLM and use synthetic reports.",
    ),
) -> None:
    """
    Generate daily health reports and dashboards for every configured profile.
    """
    logger.info("Loading configuration from %s", config)
    app_config = _load_config_or_exit(config)

    summary_table = Table(title="Configuration Summary")
    summary_table.add_column("Key")
    summary_table.add_column("Value", overflow="fold")
    summary_table.add_row("Profiles", str(len(app_config.profiles)))
    summary_table.add_row("Output root", str(app_config.output_root) if app_config.output_root else "Default")
    summary_table.add_row("LLM", "disabled" if no_llm or not app_config.use_llm else (app_config.llm or "default"))
    summary_table.add_row("Config hash", app_config.hash)
    console.print(summary_table)

    console.print("[yellow]Running pipeline...[/]")
    result = execute_pipeline(app_config, use_llm=False if no_llm else None, dry_run=dry_run)
    _print_pipeline_result(result)
    if result.scaffold is not None:
        _print_scaffold_report(result.scaffold)

    if dry_run:
        console.print("[bold blue]Dry run complete.[/] No history or dashboards written.")
    else:
        console.print("[bold green]Pipeline completed.[/]")


@app.command()
def history(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to the profile configuration TOML file.",
        callback=_resolve_config_path,
    ),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Only show this profile id."),
) -> None:
    """
    Show the stored exposure history.
    """
    app_config = _load_config_or_exit(config)
    profiles = app_config.profiles
    if profile is not None:
        selected = app_config.find_profile(profile)
        if selected is None:
            console.print(f"[bold red]Unknown profile:[/] {profile}")
            raise typer.Exit(code=1)
        profiles = [selected]

    data_dir = resolve_data_dir(app_config.data_dir)
    for entry in profiles:
        records = load_history(data_dir, entry.id)
        if not records:
            console.print(f"[yellow]No history for[/] {entry.id}.")
            continue
        table = Table(title=f"Exposure history: {entry.id}")
        table.add_column("Date")
        table.add_column("Score", justify="right")
        table.add_column("Max heat (°F)", justify="right")
        table.add_column("Max AQI", justify="right")
        table.add_column("Max UV", justify="right")
        for record in records:
            table.add_row(
                record.date,
                str(record.personal_health_risk_score),
                f"{record.max_heat:g}",
                f"{record.max_aqi:g}",
                f"{record.max_uv:g}",
            )
        console.print(table)


@app.command("config-hash")
def config_hash(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to the profile configuration TOML file.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    Output the deterministic hash of a config file for change detection.
    """
    app_config = _load_config_or_exit(config)
    console.print(f"[bold green]{app_config.hash}[/]")


@app.command()
def scaffold(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to the profile configuration TOML file.",
        callback=_resolve_config_path,
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Rewrite placeholder pages even if they already exist.",
    ),
) -> None:
    """
    Create/refresh the dashboard directories and menu without fetching data.
    """
    app_config = _load_config_or_exit(config)
    _print_scaffold_report(generate_site_structure(app_config, force=force))


def main() -> None:
    """
    Entry-point used by the console script defined in pyproject.toml.
    """
    app()
