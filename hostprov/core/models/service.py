"""
ServiceDescriptor — declarative record of how the host runs the daemon.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class ServiceDescriptor(BaseModel):
    """Launch and supervision record for the long-running service."""

    label: str
    program_arguments: list[str] = Field(min_length=1)
    working_directory: Path
    stdout_path: Path
    stderr_path: Path
    user_name: str
    run_at_load: bool = True
    keep_alive: bool = True  # restart whenever the process exits

    @property
    def executable(self) -> str:
        return self.program_arguments[0]

    @property
    def log_directories(self) -> list[Path]:
        """Distinct parent directories of the two log files."""
        dirs: list[Path] = []
        for path in (self.stdout_path, self.stderr_path):
            if path.parent not in dirs:
                dirs.append(path.parent)
        return dirs

    def to_launchd(self) -> dict[str, Any]:
        """Render as a launchd property list dictionary."""
        return {
            "Label": self.label,
            "ProgramArguments": list(self.program_arguments),
            "RunAtLoad": self.run_at_load,
            "KeepAlive": self.keep_alive,
            "UserName": self.user_name,
            "WorkingDirectory": str(self.working_directory),
            "StandardOutPath": str(self.stdout_path),
            "StandardErrorPath": str(self.stderr_path),
        }
