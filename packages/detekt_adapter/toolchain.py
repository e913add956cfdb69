"""Locate the JVM and the Detekt jars needed to launch the CLI."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

_LOG = logging.getLogger(__name__)

MAIN_CLASS = "io.gitlab.arturbosch.detekt.cli.Main"
JAVA_ENV = "BLD_DETEKT_JAVA"

# Jar name prefixes making up Detekt's runtime classpath. Version suffixes vary,
# so jars are matched by prefix at run time.
DETEKT_JAR_PREFIXES = (
    "contester-breakpoint-",
    "detekt-",
    "jcommander-",
    "kotlin-compiler-embeddable-",
    "kotlin-daemon-embeddable-",
    "kotlin-reflect-",
    "kotlin-script-runtime-",
    "kotlin-stdlib-",
    "kotlinx-coroutines-core-jvm-",
    "kotlinx-html-jvm-",
    "kotlinx-serialization-",
    "sarif4k-",
    "snakeyaml-engine-",
    "trove4j-",
)
_SKIPPED_SUFFIXES = ("-sources.jar", "-javadoc.jar")


def java_tool(environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the ``java`` executable to launch Detekt with."""

    env = os.environ if environ is None else environ
    override = env.get(JAVA_ENV)
    if override:
        return override
    java_home = env.get("JAVA_HOME")
    if java_home:
        name = "java.exe" if os.name == "nt" else "java"
        return str(Path(java_home) / "bin" / name)
    return "java"


def is_detekt_jar(name: str) -> bool:
    if not name.endswith(".jar") or name.endswith(_SKIPPED_SUFFIXES):
        return False
    return name.startswith(DETEKT_JAR_PREFIXES)


def detekt_classpath(lib_dir: Path) -> List[str]:
    """Return absolute paths of the Detekt jars found in ``lib_dir``, sorted by name."""

    if not lib_dir.is_dir():
        _LOG.warning("Library directory not found: %s", lib_dir)
        return []
    jars = [
        str(entry.absolute())
        for entry in sorted(lib_dir.iterdir(), key=lambda p: p.name)
        if entry.is_file() and is_detekt_jar(entry.name)
    ]
    if not jars:
        _LOG.warning("No Detekt jars found in %s", lib_dir)
    return jars


__all__ = ["DETEKT_JAR_PREFIXES", "JAVA_ENV", "MAIN_CLASS", "detekt_classpath", "is_detekt_jar", "java_tool"]
