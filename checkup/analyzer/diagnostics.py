"""Diagnostic records and the errors that produce them."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class Level(str, Enum):
    """Severity of a diagnostic."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """One finding, consumed by the reporter."""
    level: Level
    message: str
    file: Optional[str] = None
    line: Optional[int] = None

    def to_dict(self) -> dict:
        """Serialize for JSON output (absent fields are omitted)."""
        data = {"level": self.level.value, "message": self.message}
        if self.file is not None:
            data["file"] = self.file
        if self.line is not None:
            data["line"] = self.line
        return data


class ParseError(Exception):
    """A module's source could not be read or parsed."""

    def __init__(self, path: Path, reason: str, line: Optional[int] = None):
        self.path = Path(path)
        self.reason = reason
        self.line = line
        super().__init__(f"{self.path}: {reason}")


class ProjectConfigError(Exception):
    """A project-description file (tsconfig.json/jsconfig.json) is unusable."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")
