"""Configuration management for checkup.

Loads environment variables (optionally from a .env file) and turns them,
together with CLI overrides, into an immutable AnalysisContext.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv


class ReexportPolicy(str, Enum):
    """How forwarding declarations (`export ... from`) count as usage."""

    DIRECT = "direct"
    TRANSITIVE = "transitive"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_file: Optional[Path] = None):
        """Initialize config by loading .env file.

        Args:
            env_file: Explicit .env path. Defaults to .env in the current directory.
        """
        load_dotenv(env_file or Path.cwd() / ".env")

    @property
    def reexport_policy(self) -> ReexportPolicy:
        """Get the re-export policy from CHECKUP_REEXPORT_POLICY.

        Raises:
            ValueError: If the variable holds an unknown policy name
        """
        raw = os.getenv("CHECKUP_REEXPORT_POLICY", ReexportPolicy.DIRECT.value)
        try:
            return ReexportPolicy(raw.strip().lower())
        except ValueError:
            raise ValueError(
                f"CHECKUP_REEXPORT_POLICY must be one of "
                f"{', '.join(p.value for p in ReexportPolicy)}, got {raw!r}"
            ) from None

    @property
    def jobs(self) -> int:
        """Get the worker count for the parallel phases.

        Priority:
        1. CHECKUP_JOBS environment variable
        2. min(8, cpu_count)
        """
        raw = os.getenv("CHECKUP_JOBS")
        if raw:
            jobs = int(raw)
            if jobs < 1:
                raise ValueError(f"CHECKUP_JOBS must be positive, got {jobs}")
            return jobs
        return min(8, os.cpu_count() or 1)

    @property
    def check_dead_locals(self) -> bool:
        return _parse_bool(os.getenv("CHECKUP_DEAD_LOCALS", "true"))

    @property
    def check_class_components(self) -> bool:
        return _parse_bool(os.getenv("CHECKUP_CLASS_COMPONENTS", "true"))

    def to_context(self, base_dir: Path, **overrides) -> "AnalysisContext":
        """Build the immutable context for one run.

        Args:
            base_dir: Directory that diagnostic file paths are reported relative to
            **overrides: Values from the CLI; None means "use the environment"

        Returns:
            AnalysisContext instance
        """
        values = {
            "reexport_policy": self.reexport_policy,
            "jobs": self.jobs,
            "check_dead_locals": self.check_dead_locals,
            "check_class_components": self.check_class_components,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return AnalysisContext(base_dir=Path(base_dir).resolve(), **values)


@dataclass(frozen=True)
class AnalysisContext:
    """Settings shared by every analysis phase. Never mutated after creation."""

    base_dir: Path = field(default_factory=Path.cwd)
    reexport_policy: ReexportPolicy = ReexportPolicy.DIRECT
    jobs: int = 1
    check_dead_locals: bool = True
    check_class_components: bool = True

    def display_path(self, path: Path) -> str:
        """Path relative to the base directory, in POSIX form."""
        try:
            return Path(path).relative_to(self.base_dir).as_posix()
        except ValueError:
            return Path(path).as_posix()
