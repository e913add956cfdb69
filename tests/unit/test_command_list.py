import os
from pathlib import Path

import pytest

from packages.detekt_adapter.errors import ConfigurationError
from packages.detekt_adapter.operation import DetektOperation, DetektOptions, build_command_list
from packages.detekt_adapter.toolchain import MAIN_CLASS
from packages.schema.models import Project, Report, ReportId

# Every flag the wrapped Detekt CLI lists in its --help output.
DETEKT_ARGS = [
    "--all-rules",
    "--auto-correct",
    "--base-path",
    "--baseline",
    "--build-upon-default-config",
    "--classpath",
    "-config",
    "--config-resource",
    "--create-baseline",
    "--debug",
    "--disable-default-rulesets",
    "--excludes",
    "--generate-config",
    "--includes",
    "--input",
    "--jdk-home",
    "--jvm-target",
    "--language-version",
    "--max-issues",
    "--parallel",
    "--plugins",
    "--report",
]


@pytest.fixture
def project(tmp_path: Path) -> Project:
    lib = tmp_path / "lib" / "bld"
    lib.mkdir(parents=True)
    for name in (
        "detekt-cli-1.23.8.jar",
        "detekt-cli-1.23.8-sources.jar",
        "jcommander-1.85.jar",
        "junit-jupiter-5.11.0.jar",
    ):
        (lib / name).write_text("")
    return Project.from_directory(tmp_path)


def _after(args, flag):
    return args[args.index(flag) + 1]


def test_no_project_fails_before_any_token():
    with pytest.raises(ConfigurationError):
        build_command_list(DetektOptions(), None, java="java")
    with pytest.raises(ConfigurationError):
        DetektOperation(java="java").command_list()


def test_prefix_is_java_classpath_and_main_class(project):
    args = DetektOperation(java="/opt/jdk/bin/java").from_project(project).command_list()

    lib = project.lib_bld_directory
    assert args[:4] == [
        "/opt/jdk/bin/java",
        "-cp",
        os.pathsep.join([str(lib / "detekt-cli-1.23.8.jar"), str(lib / "jcommander-1.85.jar")]),
        MAIN_CLASS,
    ]


def test_default_options_emit_only_project_excludes(project):
    args = DetektOperation(java="java").from_project(project).command_list()
    assert args[4:] == ["--excludes", ".*/build/.*,.*/resources/.*"]


def test_all_parameters_are_emitted(project):
    op = (
        DetektOperation(java="java")
        .from_project(project)
        .all_rules()
        .auto_correct()
        .base_path("basePath")
        .baseline("baseline")
        .build_upon_default_config()
        .classpath("path1", ["path2", "path3"])
        .config("config1", Path("config2"))
        .config_resource("configResource")
        .create_baseline()
        .debug()
        .disable_default_rulesets()
        .excludes("excludes1", "excludes2")
        .generate_config()
        .includes("includes1", "includes2")
        .input("input1", "input2")
        .jdk_home("jdkHome")
        .jvm_target("jvmTarget")
        .language_version("languageVersion")
        .max_issues(10)
        .parallel()
        .plugins("jar1", "jar2")
        .report(Report(ReportId.HTML, "reports"))
    )
    args = op.command_list()

    for flag in DETEKT_ARGS:
        assert flag in args, f"{flag} not found"
    # fixed documented order
    positions = [args.index(flag) for flag in DETEKT_ARGS]
    assert positions == sorted(positions)

    assert _after(args, "--classpath") == os.pathsep.join(os.path.abspath(p) for p in ("path1", "path2", "path3"))
    assert _after(args, "-config") == ";".join([os.path.abspath("config1"), os.path.abspath("config2")])
    assert _after(args, "--excludes") == ".*/build/.*,.*/resources/.*,excludes1,excludes2"
    assert _after(args, "--includes") == "includes1,includes2"
    assert _after(args, "--input") == f"{os.path.abspath('input1')},{os.path.abspath('input2')}"
    assert _after(args, "--plugins") == f"{os.path.abspath('jar1')},{os.path.abspath('jar2')}"
    assert _after(args, "--jvm-target") == "jvmTarget"
    assert _after(args, "--language-version") == "languageVersion"
    assert _after(args, "--base-path") == os.path.abspath("basePath")


def test_max_issues_zero_is_omitted(project):
    args = DetektOperation(java="java").from_project(project).max_issues(0).command_list()
    assert "--max-issues" not in args


def test_max_issues_positive(project):
    args = DetektOperation(java="java").from_project(project).max_issues(10).command_list()
    i = args.index("--max-issues")
    assert args[i : i + 2] == ["--max-issues", "10"]


def test_reports_are_repeated_in_order(project):
    args = (
        DetektOperation(java="java")
        .from_project(project)
        .report(Report(ReportId.XML, "/r/d.xml"))
        .report(Report(ReportId.HTML, "/r/d.html"))
        .command_list()
    )
    i = args.index("--report")
    assert args[i:] == [
        "--report",
        f"xml:{os.path.abspath('/r/d.xml')}",
        "--report",
        f"html:{os.path.abspath('/r/d.html')}",
    ]


def test_classpath_uses_platform_separator(project):
    args = DetektOperation(java="java").from_project(project).classpath("a.jar", "b.jar").command_list()
    assert _after(args, "--classpath") == f"{os.path.abspath('a.jar')}{os.pathsep}{os.path.abspath('b.jar')}"


def test_building_is_idempotent_and_pure(project):
    op = DetektOperation(java="java").from_project(project).input("src").report("md:/r/d.md")
    before = DetektOptions(**vars(op.options))
    before_lists = {k: list(v) for k, v in vars(op.options).items() if isinstance(v, list)}

    first = op.command_list()
    second = op.command_list()

    assert first == second
    assert first is not second
    assert op.options == before
    assert {k: v for k, v in vars(op.options).items() if isinstance(v, list)} == before_lists


def test_java_defaults_to_environment(project, monkeypatch):
    monkeypatch.setenv("BLD_DETEKT_JAVA", "/custom/java")
    args = build_command_list(DetektOptions(), project)
    assert args[0] == "/custom/java"
