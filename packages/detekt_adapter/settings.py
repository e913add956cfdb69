"""Load operation settings from a project's ``detekt.yaml``."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from packages.detekt_adapter.errors import ConfigurationError
from packages.schema.models import DetektSettings

_LOG = logging.getLogger(__name__)

SETTINGS_FILE = "detekt.yaml"

_PATH_FIELDS = ("base_path", "baseline", "config_resource", "jdk_home")
_PATH_LIST_FIELDS = ("classpath", "config", "input", "plugins")


def find_settings(work_directory: Path) -> Optional[Path]:
    """Return the settings file in ``work_directory``, if there is one."""

    candidate = work_directory / SETTINGS_FILE
    return candidate if candidate.is_file() else None


def load_settings(path: Path) -> DetektSettings:
    """Parse ``path`` into :class:`DetektSettings`.

    Relative paths in the file are resolved against the file's directory.
    """

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        _LOG.debug("Settings file %s is empty", path)
        return DetektSettings()
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping, got {type(raw).__name__}")

    data = _resolve_paths(raw, path.parent.absolute())
    try:
        return DetektSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings in {path}: {exc}") from exc


def _resolve_paths(raw: Dict[str, Any], base: Path) -> Dict[str, Any]:
    data = dict(raw)
    for key in _PATH_FIELDS:
        if isinstance(data.get(key), str):
            data[key] = str(base / data[key])
    for key in _PATH_LIST_FIELDS:
        values = data.get(key)
        if isinstance(values, str):
            values = [values]
        if isinstance(values, list):
            data[key] = [str(base / v) if isinstance(v, str) else v for v in values]
    reports = data.get("reports")
    if isinstance(reports, list):
        data["reports"] = [
            {**entry, "path": str(base / entry["path"])}
            if isinstance(entry, dict) and isinstance(entry.get("path"), str)
            else entry
            for entry in reports
        ]
    return data


__all__ = ["SETTINGS_FILE", "find_settings", "load_settings"]
