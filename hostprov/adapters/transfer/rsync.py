"""
rsync adapter — resumable directory copy.

``--partial`` keeps interrupted files so the next attempt resumes
them; rsync writes each file to a hidden temporary name and renames
it into place, so a destination is never left with a half-written
file under its final name.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hostprov.adapters.base import HostAdapter
from hostprov.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


class RsyncAdapter(HostAdapter):
    """Bulk copy from a local path or ``host:path`` remote."""

    def __init__(self, runner, io_timeout: int = 60):
        super().__init__(runner)
        self.io_timeout = io_timeout

    @property
    def name(self) -> str:
        return "rsync"

    @property
    def tool(self) -> str:
        return "rsync"

    def copy(self, source: str, destination: Path) -> Receipt:
        return self.runner.run(
            [
                self.tool,
                "-a",
                "--partial",
                f"--timeout={self.io_timeout}",
                source,
                str(destination),
            ]
        )
