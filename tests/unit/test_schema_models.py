import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.schema.models import DetektSettings, Project, Report, ReportId


def test_report_ids_are_ordered() -> None:
    assert list(ReportId) == [ReportId.TXT, ReportId.XML, ReportId.HTML, ReportId.MD, ReportId.SARIF]


@pytest.mark.parametrize("report_id", list(ReportId))
def test_report_id_lookup_by_name(report_id: ReportId) -> None:
    assert ReportId[report_id.name] is report_id
    assert Report(report_id.name, "/r/out").id is report_id
    assert Report(report_id.value, "/r/out").id is report_id


def test_report_rejects_unknown_id() -> None:
    with pytest.raises(ValidationError):
        Report("JSON", "/r/d.json")


def test_report_rejects_extra_fields() -> None:
    with pytest.raises(ValidationError):
        Report.model_validate({"id": "xml", "path": "/r/d.xml", "unexpected": True})


def test_report_path_is_absolute() -> None:
    report = Report(ReportId.XML, Path("reports") / "d.xml")
    assert report.path == os.path.abspath(os.path.join("reports", "d.xml"))
    assert Report(id=ReportId.MD, path="/r/d.md").path == os.path.abspath("/r/d.md")


def test_report_as_argument_uses_lowercase_kind() -> None:
    assert Report(ReportId.SARIF, "/r/d.sarif").as_argument() == f"sarif:{os.path.abspath('/r/d.sarif')}"


def test_report_parse() -> None:
    report = Report.parse("html:/r/d.html")
    assert report.id is ReportId.HTML
    assert report.path == os.path.abspath("/r/d.html")

    with pytest.raises(ValueError):
        Report.parse("no-separator")
    with pytest.raises(ValidationError):
        Report.parse("json:/r/d.json")


def test_report_is_frozen() -> None:
    report = Report(ReportId.TXT, "/r/d.txt")
    with pytest.raises(ValidationError):
        report.path = "/other"  # type: ignore[misc]


def test_project_defaults_lib_directory(tmp_path: Path) -> None:
    project = Project.from_directory(tmp_path)
    assert project.work_directory == tmp_path
    assert project.lib_bld_directory == tmp_path / "lib" / "bld"


def test_project_paths_are_absolute(tmp_path: Path) -> None:
    project = Project(work_directory=Path("examples"), lib_bld_directory=tmp_path / "jars")
    assert project.work_directory.is_absolute()
    assert project.lib_bld_directory == tmp_path / "jars"


def test_settings_defaults_and_bounds() -> None:
    settings = DetektSettings()
    assert settings.max_issues is None
    assert settings.classpath == []
    assert settings.reports == []

    with pytest.raises(ValidationError):
        DetektSettings(max_issues=-1)
    with pytest.raises(ValidationError):
        DetektSettings.model_validate({"unknown_option": True})


def test_settings_parse_reports() -> None:
    settings = DetektSettings.model_validate({"reports": [{"id": "XML", "path": "/r/d.xml"}]})
    assert settings.reports == [Report(ReportId.XML, "/r/d.xml")]


def test_report_rejects_unknown_id_by_keyword() -> None:
    with pytest.raises(ValidationError):
        Report(id="JSON", path="d.json")
