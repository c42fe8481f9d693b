"""
Error hierarchy for Festive Bot.

Every error carries a machine-readable `code` so the fatal-error status
report can name the failure kind without parsing English messages.
"""

from __future__ import annotations

from typing import Optional


class FestiveError(Exception):
    """Base class for all application-level errors."""

    code: str = "FESTIVE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code}: {self.message})"


class ConfigMissingError(FestiveError):
    code = "CONFIG_MISSING"

    def __init__(self, var: str):
        super().__init__(f"Required environment variable {var} is not set")
        self.var = var


class InitError(FestiveError):
    """The process could not set itself up (signal handlers and the like)."""

    code = "INIT"


class ConversionError(FestiveError):
    """A calendar instant or number could not be constructed."""

    code = "CONVERSION"


class ParseError(FestiveError):
    """Upstream payload (or a response body) was malformed."""

    code = "PARSE"


class HttpError(FestiveError):
    code = "HTTP"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FilesystemError(FestiveError):
    """Checkpoint persistence failed."""

    code = "FILESYSTEM"
