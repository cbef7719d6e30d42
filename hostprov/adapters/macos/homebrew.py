"""
Homebrew adapter — package manager bootstrap and batched installs.

Installs are issued as ONE ``brew install`` per package set so the
installer's all-or-nothing batch semantics are preserved.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hostprov.adapters.base import HostAdapter
from hostprov.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

INSTALLER_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

# Where the installer puts brew on Apple Silicon; not on PATH until shellenv runs
DEFAULT_BREW_PATH = "/opt/homebrew/bin/brew"


class HomebrewAdapter(HostAdapter):
    """Drive ``brew`` through the command runner."""

    def __init__(self, runner, brew_path: str | None = None):
        super().__init__(runner)
        self._brew_path = brew_path

    @property
    def name(self) -> str:
        return "homebrew"

    @property
    def tool(self) -> str:
        return "brew"

    @property
    def brew(self) -> str:
        """Resolved brew executable."""
        return self._brew_path or self.runner.which(self.tool) or DEFAULT_BREW_PATH

    def probe(self) -> Receipt:
        """``brew --version`` — succeeds only when brew is usable."""
        return self.runner.run([self.brew, "--version"], timeout=60)

    def bootstrap(self) -> Receipt:
        """Run the upstream non-interactive installer."""
        logger.info("Installing Homebrew...")
        receipt = self.runner.run(
            ["/bin/bash", "-c", f'/bin/bash -c "$(curl -fsSL {INSTALLER_URL})"'],
            env={"NONINTERACTIVE": "1"},
            capture=False,
        )
        if receipt.ok and self._brew_path is None and self.runner.which(self.tool) is None:
            self._brew_path = DEFAULT_BREW_PATH
        return receipt

    def install(self, names: list[str], *, cask: bool = False) -> Receipt:
        """Install every package in ``names`` in a single invocation."""
        cmd = [self.brew, "install"]
        if cask:
            cmd.append("--cask")
        cmd.extend(names)
        return self.runner.run(cmd, capture=False)

    def program(self, name: str) -> str:
        """Resolve a brew-installed program.

        Falls back to brew's own bin directory, which a fresh install
        does not put on PATH.
        """
        return self.runner.which(name) or str(Path(self.brew).parent / name)
