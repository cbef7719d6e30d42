"""
uv adapter — Python environment for the service checkout.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hostprov.adapters.base import HostAdapter
from hostprov.adapters.macos.homebrew import HomebrewAdapter
from hostprov.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


class UvAdapter(HostAdapter):
    """Create a virtualenv and install the checkout into it.

    uv is installed by Homebrew during the same run, so the executable
    is resolved on each call rather than once at construction.
    """

    def __init__(self, runner, homebrew: HomebrewAdapter | None = None):
        super().__init__(runner)
        self._homebrew = homebrew

    @property
    def name(self) -> str:
        return "uv"

    @property
    def tool(self) -> str:
        return "uv"

    @property
    def uv(self) -> str:
        if self._homebrew is not None:
            return self._homebrew.program(self.tool)
        return self.runner.which(self.tool) or self.tool

    def venv(self, project_dir: Path) -> Receipt:
        return self.runner.run([self.uv, "venv", "--allow-existing"], cwd=project_dir, capture=False)

    def install_editable(self, project_dir: Path) -> Receipt:
        return self.runner.run(
            [self.uv, "pip", "install", "-e", "."], cwd=project_dir, capture=False
        )
