"""Fluent Detekt operation: accumulate options, build the argv, run Detekt."""
from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Union

from packages.detekt_adapter.errors import ConfigurationError, ExitStatusError
from packages.detekt_adapter.process import ProcessResult, ProcessRunner, SubprocessRunner
from packages.detekt_adapter.toolchain import MAIN_CLASS, detekt_classpath, java_tool
from packages.schema.models import DetektSettings, Project, Report

_LOG = logging.getLogger(__name__)

PathInput = Union[str, "os.PathLike[str]"]

BASELINE_FILE = "detekt-baseline.xml"
PROJECT_EXCLUDES = (".*/build/.*", ".*/resources/.*")


@dataclass
class DetektOptions:
    """Accumulated option state of a :class:`DetektOperation`.

    The lists are the operation's actual storage. Clearing or editing them
    in place is the supported way to reset accumulated values.
    """

    all_rules: bool = False
    auto_correct: bool = False
    base_path: Optional[str] = None
    baseline: Optional[str] = None
    build_upon_default_config: bool = False
    classpath: List[str] = field(default_factory=list)
    config: List[str] = field(default_factory=list)
    config_resource: Optional[str] = None
    create_baseline: bool = False
    debug: bool = False
    disable_default_rulesets: bool = False
    excludes: List[str] = field(default_factory=list)
    generate_config: bool = False
    includes: List[str] = field(default_factory=list)
    input: List[str] = field(default_factory=list)
    jdk_home: Optional[str] = None
    jvm_target: Optional[str] = None
    language_version: Optional[str] = None
    max_issues: int = 0
    parallel: bool = False
    plugins: List[str] = field(default_factory=list)
    reports: List[Report] = field(default_factory=list)


def to_absolute(path: PathInput) -> str:
    """Normalise a ``str``, :class:`pathlib.Path` or other ``os.PathLike`` to an absolute path."""

    return os.path.abspath(os.fsdecode(os.fspath(path)))


def _flatten(values: Sequence[object]) -> Iterator[object]:
    for value in values:
        if isinstance(value, (str, bytes, os.PathLike, Report)):
            yield value
        elif isinstance(value, Iterable):
            yield from value
        else:
            raise TypeError(f"Unsupported value {value!r} ({type(value).__name__})")


def _append_paths(target: List[str], values: Sequence[object]) -> None:
    target.extend(to_absolute(value) for value in _flatten(values))  # type: ignore[arg-type]


def _append_patterns(target: List[str], values: Sequence[object]) -> None:
    target.extend(os.fsdecode(os.fspath(value)) for value in _flatten(values))  # type: ignore[arg-type]


def build_command_list(
    options: DetektOptions,
    project: Optional[Project],
    java: Optional[str] = None,
) -> List[str]:
    """Return the argv that runs Detekt with ``options`` for ``project``.

    Options are emitted in the order of Detekt's own ``--help`` listing, so
    equal state always yields an equal list. ``options`` is never modified.
    """

    if project is None:
        raise ConfigurationError("A project must be specified.")

    args: List[str] = [
        java or java_tool(),
        "-cp",
        os.pathsep.join(detekt_classpath(project.lib_bld_directory)),
        MAIN_CLASS,
    ]

    _flag(args, "--all-rules", options.all_rules)
    _flag(args, "--auto-correct", options.auto_correct)
    _value(args, "--base-path", options.base_path)
    _value(args, "--baseline", options.baseline)
    _flag(args, "--build-upon-default-config", options.build_upon_default_config)
    _joined(args, "--classpath", options.classpath, os.pathsep)
    _joined(args, "-config", options.config, ";")
    _value(args, "--config-resource", options.config_resource)
    _flag(args, "--create-baseline", options.create_baseline)
    _flag(args, "--debug", options.debug)
    _flag(args, "--disable-default-rulesets", options.disable_default_rulesets)
    _joined(args, "--excludes", options.excludes, ",")
    _flag(args, "--generate-config", options.generate_config)
    _joined(args, "--includes", options.includes, ",")
    _joined(args, "--input", options.input, ",")
    _value(args, "--jdk-home", options.jdk_home)
    _value(args, "--jvm-target", options.jvm_target)
    _value(args, "--language-version", options.language_version)
    if options.max_issues > 0:
        args.extend(("--max-issues", str(options.max_issues)))
    _flag(args, "--parallel", options.parallel)
    _joined(args, "--plugins", options.plugins, ",")
    for report in options.reports:
        args.extend(("--report", report.as_argument()))

    return args


def _flag(args: List[str], name: str, enabled: bool) -> None:
    if enabled:
        args.append(name)


def _value(args: List[str], name: str, value: Optional[str]) -> None:
    if value:
        args.extend((name, value))


def _joined(args: List[str], name: str, values: List[str], separator: str) -> None:
    if values:
        args.extend((name, separator.join(values)))


class DetektOperation:
    """Performs static code analysis with Detekt.

    Setters return the operation so calls can be chained. Path-like options
    accept a ``str``, a :class:`pathlib.Path` or any ``os.PathLike`` and are
    stored as absolute path strings. Collection setters append, and accept
    either individual values or iterables of values.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        logger: Optional[logging.Logger] = None,
        java: Optional[str] = None,
    ) -> None:
        self.options = DetektOptions()
        self.project: Optional[Project] = None
        self.runner: ProcessRunner = runner or SubprocessRunner()
        self.java = java
        self._log = logger or _LOG

    def all_rules(self, enabled: bool = True) -> "DetektOperation":
        """Activate all available (even unstable) rules."""

        self.options.all_rules = enabled
        return self

    def auto_correct(self, enabled: bool = True) -> "DetektOperation":
        """Allow rules that support it to auto correct code."""

        self.options.auto_correct = enabled
        return self

    def base_path(self, path: PathInput) -> "DetektOperation":
        """Directory that file paths in formatted reports are made relative to."""

        self.options.base_path = to_absolute(path)
        return self

    def baseline(self, path: PathInput) -> "DetektOperation":
        """Baseline file; only findings missing from it are reported."""

        self.options.baseline = to_absolute(path)
        return self

    def build_upon_default_config(self, enabled: bool = True) -> "DetektOperation":
        self.options.build_upon_default_config = enabled
        return self

    def classpath(self, *paths: object) -> "DetektOperation":
        """Class directories and jars used for type resolution."""

        _append_paths(self.options.classpath, paths)
        return self

    def config(self, *paths: object) -> "DetektOperation":
        """Detekt YAML configuration files."""

        _append_paths(self.options.config, paths)
        return self

    def config_resource(self, path: PathInput) -> "DetektOperation":
        self.options.config_resource = to_absolute(path)
        return self

    def create_baseline(self, enabled: bool = True) -> "DetektOperation":
        """Record the current findings as the baseline for future runs."""

        self.options.create_baseline = enabled
        return self

    def debug(self, enabled: bool = True) -> "DetektOperation":
        self.options.debug = enabled
        return self

    def disable_default_rulesets(self, enabled: bool = True) -> "DetektOperation":
        self.options.disable_default_rulesets = enabled
        return self

    def excludes(self, *patterns: object) -> "DetektOperation":
        """Glob patterns of paths to leave out of the analysis."""

        _append_patterns(self.options.excludes, patterns)
        return self

    def generate_config(self, enabled: bool = True) -> "DetektOperation":
        """Export Detekt's default configuration instead of analysing."""

        self.options.generate_config = enabled
        return self

    def includes(self, *patterns: object) -> "DetektOperation":
        """Glob patterns of paths to analyse, combined with :meth:`excludes`."""

        _append_patterns(self.options.includes, patterns)
        return self

    def input(self, *paths: object) -> "DetektOperation":
        """Source paths to analyse. Detekt uses its working directory when empty."""

        _append_paths(self.options.input, paths)
        return self

    def jdk_home(self, path: PathInput) -> "DetektOperation":
        self.options.jdk_home = to_absolute(path)
        return self

    def jvm_target(self, target: str) -> "DetektOperation":
        self.options.jvm_target = target
        return self

    def language_version(self, version: str) -> "DetektOperation":
        self.options.language_version = version
        return self

    def max_issues(self, count: int) -> "DetektOperation":
        """Succeed only while the number of findings stays within ``count``; 0 unsets it."""

        if count < 0:
            raise ValueError(f"max_issues must be >= 0, got {count}")
        self.options.max_issues = count
        return self

    def parallel(self, enabled: bool = True) -> "DetektOperation":
        self.options.parallel = enabled
        return self

    def plugins(self, *jars: object) -> "DetektOperation":
        """Extra rule set jars, such as detekt-formatting."""

        _append_paths(self.options.plugins, jars)
        return self

    def report(self, *reports: object) -> "DetektOperation":
        """Add reports, given as :class:`Report` objects or ``kind:path`` strings."""

        for report in _flatten(reports):
            if isinstance(report, str):
                report = Report.parse(report)
            if not isinstance(report, Report):
                raise TypeError(f"Unsupported report {report!r}")
            self.options.reports.append(report)
        return self

    def from_project(self, project: Project) -> "DetektOperation":
        """Bind the operation to ``project``.

        Adopts ``detekt-baseline.xml`` from the project directory when present
        and no baseline was set, and excludes build and resource directories.
        """

        self.project = project
        baseline = project.work_directory / BASELINE_FILE
        if baseline.is_file():
            if self.options.baseline is None:
                self.options.baseline = str(baseline.absolute())
            else:
                self._log.debug("Keeping baseline %s over %s", self.options.baseline, baseline)
        self.options.excludes.extend(PROJECT_EXCLUDES)
        return self

    def apply_settings(self, settings: DetektSettings) -> "DetektOperation":
        """Apply values from a settings file through the regular setters."""

        toggles = (
            "all_rules",
            "auto_correct",
            "build_upon_default_config",
            "create_baseline",
            "debug",
            "disable_default_rulesets",
            "generate_config",
            "parallel",
        )
        for name in toggles:
            value = getattr(settings, name)
            if value is not None:
                getattr(self, name)(value)

        for name in ("base_path", "baseline", "config_resource", "jdk_home", "jvm_target", "language_version"):
            value = getattr(settings, name)
            if value is not None:
                getattr(self, name)(value)

        if settings.max_issues is not None:
            self.max_issues(settings.max_issues)

        self.classpath(settings.classpath)
        self.config(settings.config)
        self.excludes(settings.excludes)
        self.includes(settings.includes)
        self.input(settings.input)
        self.plugins(settings.plugins)
        self.report(settings.reports)
        return self

    def command_list(self) -> List[str]:
        """Build the Detekt argv from the current state."""

        args = build_command_list(self.options, self.project, self.java)
        self._log.debug("%s", " ".join(shlex.quote(part) for part in args))
        return args

    def execute(self) -> ProcessResult:
        """Run Detekt, raising :class:`ExitStatusError` when it fails."""

        if self.project is None:
            self._log.error("A project must be specified.")
            raise ConfigurationError("A project must be specified.")

        args = self.command_list()
        result = self.runner.run(args, cwd=self.project.work_directory)
        self._log_streams(result)

        if result.returncode != 0:
            self._log.error("Detekt failed with exit status %s", result.returncode)
            raise ExitStatusError(result.returncode)

        if self.options.create_baseline:
            if self.options.baseline:
                self._log.info("Detekt baseline generated: %s", self.options.baseline)
            else:
                self._log.info("Detekt baseline generated.")
        else:
            self._log.info("Detekt operation finished successfully.")
        return result

    def _log_streams(self, result: ProcessResult) -> None:
        for line in result.stdout.splitlines():
            self._log.info("%s", line)
        for line in result.stderr.splitlines():
            self._log.warning("%s", line)


__all__ = [
    "BASELINE_FILE",
    "DetektOperation",
    "DetektOptions",
    "PROJECT_EXCLUDES",
    "build_command_list",
    "to_absolute",
]
