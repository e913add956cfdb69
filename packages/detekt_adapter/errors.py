"""Exceptions raised by the Detekt operation."""
from __future__ import annotations


class DetektError(Exception):
    """Base class for Detekt operation failures."""


class ConfigurationError(DetektError):
    """The operation cannot run as configured (no project, bad settings)."""


class ExitStatusError(DetektError):
    """Detekt exited with a non-zero status."""

    def __init__(self, exit_status: int) -> None:
        super().__init__(f"Detekt exited with status {exit_status}")
        self.exit_status = exit_status


__all__ = ["ConfigurationError", "DetektError", "ExitStatusError"]
