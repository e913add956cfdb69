"""Typer CLI entrypoint for the Detekt build step."""
from __future__ import annotations

import json
import logging
import shlex
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from packages.detekt_adapter.errors import ConfigurationError, ExitStatusError
from packages.detekt_adapter.operation import BASELINE_FILE, DetektOperation
from packages.detekt_adapter.settings import find_settings, load_settings
from packages.schema.models import Project, Report

app = typer.Typer(add_completion=False)
console = Console()


class DebugLogger:
    """JSONL trace of a Detekt run: start, settings, argv and exit status."""

    def __init__(self, path: Optional[Path]):
        self._handle = None
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = path.open("w", encoding="utf-8")

    def log(self, event: str, payload: Optional[Dict[str, object]] = None) -> None:
        if not self._handle:
            return
        entry: Dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event,
        }
        if payload:
            entry.update(payload)
        self._handle.write(json.dumps(entry, ensure_ascii=False) + "\n")
        self._handle.flush()

    def close(self) -> None:
        if self._handle:
            self._handle.close()
            self._handle = None


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("packages")
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=console, show_path=False))
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _prepare(
    project_dir: Path,
    settings: Optional[Path],
    debug: DebugLogger,
) -> DetektOperation:
    project = Project.from_directory(project_dir)
    operation = DetektOperation().from_project(project)

    settings_path = settings if settings is not None else find_settings(project.work_directory)
    if settings_path is not None:
        try:
            operation.apply_settings(load_settings(settings_path))
        except (ConfigurationError, OSError) as exc:
            console.print(f"[red]Failed to load settings '{settings_path}': {exc}[/]")
            debug.log("error", {"stage": "settings", "message": str(exc)})
            raise typer.Exit(code=2) from exc
        debug.log("settings", {"path": str(settings_path)})
    return operation


def _run(operation: DetektOperation, *, dry_run: bool, debug: DebugLogger) -> None:
    try:
        args = operation.command_list()
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/]")
        debug.log("error", {"stage": "command", "message": str(exc)})
        raise typer.Exit(code=2) from exc

    debug.log("command", {"argv": args})
    if dry_run:
        console.print(" ".join(shlex.quote(part) for part in args), markup=False, highlight=False, soft_wrap=True)
        debug.log("exit", {"code": 0, "dry_run": True})
        raise typer.Exit(code=0)

    try:
        operation.execute()
    except ExitStatusError as exc:
        console.print(f"[red]Detekt reported failures (exit status {exc.exit_status})[/]")
        debug.log("exit", {"code": 1, "exit_status": exc.exit_status})
        raise typer.Exit(code=1) from exc
    except (ConfigurationError, OSError) as exc:
        console.print(f"[red]Detekt could not be run: {exc}[/]")
        debug.log("error", {"stage": "execute", "message": str(exc)})
        raise typer.Exit(code=2) from exc

    console.print("[green]Detekt analysis passed[/]")
    debug.log("exit", {"code": 0})


def _parse_reports(values: List[str]) -> List[Report]:
    reports = []
    for value in values:
        try:
            reports.append(Report.parse(value))
        except (ValueError, ValidationError) as exc:
            raise typer.BadParameter(
                f"Unsupported report '{value}'. Use <txt|xml|html|md|sarif>:<path>"
            ) from exc
    return reports


@app.command()
def detekt(
    project: Path = typer.Option(Path("."), "--project", help="Project directory"),
    settings: Optional[Path] = typer.Option(
        None, "--settings", help="Settings YAML (default: <project>/detekt.yaml when present)"
    ),
    input: List[Path] = typer.Option([], "--input", help="Repeatable: source path to analyse"),
    config: List[Path] = typer.Option([], "--config", help="Repeatable: Detekt config file"),
    classpath: List[Path] = typer.Option([], "--classpath", help="Repeatable: classpath entry for type resolution"),
    plugins: List[Path] = typer.Option([], "--plugins", help="Repeatable: plugin jar"),
    includes: List[str] = typer.Option([], "--includes", help="Repeatable: glob pattern to include"),
    excludes: List[str] = typer.Option([], "--excludes", help="Repeatable: glob pattern to exclude"),
    report: List[str] = typer.Option([], "--report", help="Repeatable: <kind>:<path>"),
    baseline: Optional[Path] = typer.Option(None, "--baseline", help="Baseline file"),
    base_path: Optional[Path] = typer.Option(None, "--base-path", help="Base path for report file paths"),
    config_resource: Optional[str] = typer.Option(None, "--config-resource", help="Config resource path"),
    jdk_home: Optional[Path] = typer.Option(None, "--jdk-home", help="JDK home for type resolution"),
    jvm_target: Optional[str] = typer.Option(None, "--jvm-target", help="Target JVM bytecode version"),
    language_version: Optional[str] = typer.Option(None, "--language-version", help="Kotlin language version"),
    max_issues: int = typer.Option(0, "--max-issues", min=0, help="Allowed findings before failing (0: unset)"),
    all_rules: bool = typer.Option(False, "--all-rules", help="Activate all rules, including unstable ones"),
    auto_correct: bool = typer.Option(False, "--auto-correct", help="Let supporting rules correct code"),
    build_upon_default_config: bool = typer.Option(
        False, "--build-upon-default-config", help="Layer config files on Detekt's defaults"
    ),
    disable_default_rulesets: bool = typer.Option(
        False, "--disable-default-rulesets", help="Disable the default rule sets"
    ),
    generate_config: bool = typer.Option(False, "--generate-config", help="Export the default config"),
    parallel: bool = typer.Option(False, "--parallel", help="Analyse files in parallel"),
    debug_output: bool = typer.Option(False, "--debug", help="Ask Detekt for debug output"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the command instead of running it"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log the full command line"),
    debug_log: Optional[Path] = typer.Option(None, "--debug-log", help="Write debug trace JSONL to this path"),
) -> None:
    """Check Kotlin sources with Detekt."""

    _configure_logging(verbose)
    debug = DebugLogger(debug_log)
    try:
        reports = _parse_reports(report)
        debug.log("start", {"command": "detekt", "project": str(project)})
        operation = _prepare(project, settings, debug)

        operation.input(input).config(config).classpath(classpath).plugins(plugins)
        operation.includes(includes).excludes(excludes).report(reports)
        if baseline is not None:
            operation.baseline(baseline)
        if base_path is not None:
            operation.base_path(base_path)
        if config_resource is not None:
            operation.config_resource(config_resource)
        if jdk_home is not None:
            operation.jdk_home(jdk_home)
        if jvm_target is not None:
            operation.jvm_target(jvm_target)
        if language_version is not None:
            operation.language_version(language_version)
        if max_issues:
            operation.max_issues(max_issues)

        # Flags only switch options on, so settings-file values survive.
        for enabled, setter in (
            (all_rules, operation.all_rules),
            (auto_correct, operation.auto_correct),
            (build_upon_default_config, operation.build_upon_default_config),
            (disable_default_rulesets, operation.disable_default_rulesets),
            (generate_config, operation.generate_config),
            (parallel, operation.parallel),
            (debug_output, operation.debug),
        ):
            if enabled:
                setter()

        _run(operation, dry_run=dry_run, debug=debug)
    finally:
        debug.close()


@app.command()
def baseline(
    project: Path = typer.Option(Path("."), "--project", help="Project directory"),
    settings: Optional[Path] = typer.Option(
        None, "--settings", help="Settings YAML (default: <project>/detekt.yaml when present)"
    ),
    baseline_file: Optional[Path] = typer.Option(
        None, "--baseline", help=f"Baseline file to write (default: <project>/{BASELINE_FILE})"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the command instead of running it"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log the full command line"),
    debug_log: Optional[Path] = typer.Option(None, "--debug-log", help="Write debug trace JSONL to this path"),
) -> None:
    """Create a Detekt baseline from the current findings."""

    _configure_logging(verbose)
    debug = DebugLogger(debug_log)
    try:
        debug.log("start", {"command": "baseline", "project": str(project)})
        operation = _prepare(project, settings, debug)
        if baseline_file is not None:
            operation.baseline(baseline_file)
        elif not operation.options.baseline:
            operation.baseline(operation.project.work_directory / BASELINE_FILE)
        operation.create_baseline()
        _run(operation, dry_run=dry_run, debug=debug)
    finally:
        debug.close()


if __name__ == "__main__":  # pragma: no cover - manual execution
    app()
