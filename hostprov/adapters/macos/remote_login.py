"""
Remote login adapter — query and enable SSH via ``systemsetup``.
"""

from __future__ import annotations

import logging

from hostprov.adapters.base import HostAdapter
from hostprov.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


class RemoteLoginAdapter(HostAdapter):
    """``systemsetup -getremotelogin`` / ``-setremotelogin on``."""

    @property
    def name(self) -> str:
        return "remote-login"

    @property
    def tool(self) -> str:
        return "systemsetup"

    def query(self) -> Receipt:
        """Current state; ``metadata["enabled"]`` is True when SSH is on.

        A failed query reports enabled=False rather than failing the
        caller, matching "not observed on" semantics.
        """
        receipt = self.runner.run([self.tool, "-getremotelogin"], sudo=True, timeout=30)
        # "Remote Login: On" / "Remote Login: Off"
        enabled = receipt.ok and receipt.output.strip().endswith("On")
        receipt.metadata["enabled"] = enabled
        return receipt

    def enable(self) -> Receipt:
        return self.runner.run([self.tool, "-setremotelogin", "on"], sudo=True, timeout=60)
