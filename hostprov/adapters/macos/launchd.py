"""
launchd adapter — render and install LaunchDaemon property lists.

Installing only writes the plist; loading/unloading the daemon is a
separate operator action (see ``management_commands``).
"""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path

from hostprov.adapters.base import HostAdapter
from hostprov.core.models.receipt import Receipt
from hostprov.core.models.service import ServiceDescriptor

logger = logging.getLogger(__name__)


class LaunchdAdapter(HostAdapter):
    """Write ``/Library/LaunchDaemons/<label>.plist`` via ``sudo tee``."""

    def __init__(self, runner, descriptor_dir: Path = Path("/Library/LaunchDaemons")):
        super().__init__(runner)
        self.descriptor_dir = descriptor_dir

    @property
    def name(self) -> str:
        return "launchd"

    @property
    def tool(self) -> str:
        return "launchctl"

    def descriptor_path(self, label: str) -> Path:
        return self.descriptor_dir / f"{label}.plist"

    @staticmethod
    def render(descriptor: ServiceDescriptor) -> str:
        """Serialize a descriptor as an XML property list."""
        return plistlib.dumps(descriptor.to_launchd(), fmt=plistlib.FMT_XML).decode("utf-8")

    def install(self, descriptor: ServiceDescriptor) -> Receipt:
        """Overwrite the descriptor file with the rendered plist."""
        path = self.descriptor_path(descriptor.label)
        content = self.render(descriptor)
        receipt = self.runner.run(["tee", str(path)], sudo=True, input=content, timeout=60)
        receipt.metadata["path"] = str(path)
        # tee echoes its input; the plist is not useful in logs or receipts
        receipt.output = ""
        return receipt

    def management_commands(self, label: str, stdout_log: Path) -> list[tuple[str, str]]:
        """Operator commands for the installed daemon, as (title, command)."""
        path = self.descriptor_path(label)
        return [
            ("Start", f"sudo launchctl load {path}"),
            ("Stop", f"sudo launchctl unload {path}"),
            ("Status", f"sudo launchctl list | grep {label}"),
            ("Logs", f"tail -f {stdout_log}"),
        ]
