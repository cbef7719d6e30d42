"""
Git adapter — source checkout operations.

Uses the git CLI — never raw API calls.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hostprov.adapters.base import HostAdapter
from hostprov.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


class GitAdapter(HostAdapter):
    """Clone repositories and recognise existing checkouts."""

    @property
    def name(self) -> str:
        return "git"

    @property
    def tool(self) -> str:
        return "git"

    @staticmethod
    def is_checkout(path: Path) -> bool:
        """Whether ``path`` already holds a git working tree."""
        return (path / ".git").exists()

    def clone(self, url: str, dest: Path) -> Receipt:
        return self.runner.run(
            [self.tool, "clone", url, str(dest)],
            cwd=dest.parent,
            capture=False,
        )
