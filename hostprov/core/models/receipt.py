"""
Receipt model — the result contract for host commands.

Every command the provisioner issues against the host (systemsetup,
brew, git, rsync, launchctl...) comes back as a Receipt. Adapters
NEVER raise for a failed command — the failure is captured here and
the calling service decides which typed error it becomes.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Outcome of a single host command."""

    command: list[str] = Field(default_factory=list)
    status: Literal["ok", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    return_code: int | None = None
    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the command succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the command failed."""
        return self.status == "failed"

    @property
    def display(self) -> str:
        """The command as a single printable string."""
        return " ".join(self.command)

    @classmethod
    def success(
        cls,
        command: list[str],
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(command=list(command), status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        command: list[str],
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(command=list(command), status="failed", error=error, **kwargs)
