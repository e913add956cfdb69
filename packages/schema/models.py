"""Core schema models shared by the Detekt adapter, settings loader, and CLI."""
from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ReportId(str, Enum):
    """Report formats understood by Detekt's ``--report`` flag."""

    TXT = "txt"
    XML = "xml"
    HTML = "html"
    MD = "md"
    SARIF = "sarif"


def _as_report_id(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, ReportId):
        member = ReportId.__members__.get(value.upper())
        if member is not None:
            return member
    return value


def _as_abs_path(value: Any) -> Any:
    if isinstance(value, (str, os.PathLike)):
        return os.path.abspath(os.fsdecode(os.fspath(value)))
    return value


class Report(BaseModel):
    """Instructs Detekt to write one report of ``id`` format to ``path``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: ReportId
    path: str

    def __init__(self, id: Any, path: Any, **data: Any) -> None:
        super().__init__(id=id, path=path, **data)

    @field_validator("id", mode="before")
    @classmethod
    def _lookup_id(cls, value: Any) -> Any:
        return _as_report_id(value)

    @field_validator("path", mode="before")
    @classmethod
    def _absolute_path(cls, value: Any) -> Any:
        return _as_abs_path(value)

    @classmethod
    def parse(cls, value: str) -> "Report":
        """Build a report from the ``kind:path`` form used on the command line."""

        kind, sep, path = value.partition(":")
        if not sep or not kind or not path:
            raise ValueError(f"Invalid report '{value}'. Expected <kind>:<path>")
        return cls(kind, path)

    def as_argument(self) -> str:
        return f"{self.id.name.lower()}:{self.path}"


class Project(BaseModel):
    """The build project an operation runs against."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    work_directory: Path
    lib_bld_directory: Path

    @model_validator(mode="before")
    @classmethod
    def _default_lib_directory(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("lib_bld_directory") is None:
            work = data.get("work_directory")
            if work is not None:
                data = {**data, "lib_bld_directory": Path(os.fspath(work)) / "lib" / "bld"}
        return data

    @field_validator("work_directory", "lib_bld_directory", mode="after")
    @classmethod
    def _absolute(cls, value: Path) -> Path:
        return value.absolute()

    @classmethod
    def from_directory(cls, path: "os.PathLike[str] | str") -> "Project":
        return cls(work_directory=Path(path))


class DetektSettings(BaseModel):
    """Operation options as read from a ``detekt.yaml`` settings file."""

    model_config = ConfigDict(extra="forbid")

    all_rules: Optional[bool] = None
    auto_correct: Optional[bool] = None
    base_path: Optional[str] = None
    baseline: Optional[str] = None
    build_upon_default_config: Optional[bool] = None
    classpath: List[str] = Field(default_factory=list)
    config: List[str] = Field(default_factory=list)
    config_resource: Optional[str] = None
    create_baseline: Optional[bool] = None
    debug: Optional[bool] = None
    disable_default_rulesets: Optional[bool] = None
    excludes: List[str] = Field(default_factory=list)
    generate_config: Optional[bool] = None
    includes: List[str] = Field(default_factory=list)
    input: List[str] = Field(default_factory=list)
    jdk_home: Optional[str] = None
    jvm_target: Optional[str] = None
    language_version: Optional[str] = None
    max_issues: Optional[int] = Field(default=None, ge=0)
    parallel: Optional[bool] = None
    plugins: List[str] = Field(default_factory=list)
    reports: List[Report] = Field(default_factory=list)

    @field_validator("jvm_target", "language_version", mode="before")
    @classmethod
    def _version_text(cls, value: Any) -> Any:
        # YAML reads unquoted 17 or 1.9 as numbers.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


__all__ = ["DetektSettings", "Project", "Report", "ReportId"]
