"""Process runner used to launch Detekt."""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured streams of a finished process."""

    returncode: int
    stdout: str = ""
    stderr: str = ""


class ProcessRunner(Protocol):
    def run(self, argv: Sequence[str], cwd: Optional[Path] = None) -> ProcessResult:
        ...


class SubprocessRunner:
    """Run commands with :func:`subprocess.run`.

    Output is inherited from the parent process unless ``capture_output`` is
    set, in which case it is returned on the result.
    """

    def __init__(self, capture_output: bool = False) -> None:
        self.capture_output = capture_output

    def run(self, argv: Sequence[str], cwd: Optional[Path] = None) -> ProcessResult:
        _LOG.debug("Spawning %s (cwd=%s)", argv[0] if argv else "<empty>", cwd)
        completed = subprocess.run(  # nosec B603
            list(argv),
            cwd=cwd,
            check=False,
            capture_output=self.capture_output,
            text=True,
        )
        return ProcessResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


__all__ = ["ProcessResult", "ProcessRunner", "SubprocessRunner"]
