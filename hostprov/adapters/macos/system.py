"""
System settings adapters — ``defaults``, ``pmset``, ``fdesetup`` and
the Full Disk Access probe.

Each adapter exposes a read and a write so the configurator can
skip writes whose value is already in place.
"""

from __future__ import annotations

import logging
import re

from hostprov.adapters.base import HostAdapter
from hostprov.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

TCC_DATABASE = "/Library/Application Support/com.apple.TCC/TCC.db"

_FDA_PROMPT = (
    'tell application "System Events"\n'
    "    activate\n"
    '    display dialog "{app} needs Full Disk Access to function properly. '
    "A permission prompt will appear next. Please click 'OK' to continue.\" "
    'buttons {{"OK"}} default button "OK"\n'
    "end tell\n"
)


class DefaultsAdapter(HostAdapter):
    """Read and write preference keys with ``defaults``."""

    @property
    def name(self) -> str:
        return "defaults"

    @property
    def tool(self) -> str:
        return "defaults"

    def _base(self, current_host: bool) -> list[str]:
        return [self.tool, "-currentHost"] if current_host else [self.tool]

    def read(self, domain: str, key: str, *, current_host: bool = False, sudo: bool = False) -> Receipt:
        return self.runner.run(
            self._base(current_host) + ["read", domain, key], sudo=sudo, timeout=30
        )

    def write(
        self,
        domain: str,
        key: str,
        value: str,
        *,
        value_type: str | None = None,
        current_host: bool = False,
        sudo: bool = False,
    ) -> Receipt:
        cmd = self._base(current_host) + ["write", domain, key]
        if value_type:
            cmd.append(f"-{value_type}")
        cmd.append(value)
        return self.runner.run(cmd, sudo=sudo, timeout=30)


class PowerAdapter(HostAdapter):
    """Power management via ``pmset``."""

    @property
    def name(self) -> str:
        return "power"

    @property
    def tool(self) -> str:
        return "pmset"

    def current(self, setting: str) -> str | None:
        """Current value of a pmset setting, or None if unknown."""
        receipt = self.runner.run([self.tool, "-g"], timeout=30)
        if receipt.failed:
            return None
        match = re.search(rf"^\s*{re.escape(setting)}\s+(\S+)", receipt.output, re.MULTILINE)
        return match.group(1) if match else None

    def set(self, setting: str, value: str) -> Receipt:
        return self.runner.run([self.tool, "-a", setting, value], sudo=True, timeout=30)


class FileVaultAdapter(HostAdapter):
    """Disk encryption state via ``fdesetup``."""

    @property
    def name(self) -> str:
        return "filevault"

    @property
    def tool(self) -> str:
        return "fdesetup"

    def is_active(self) -> bool:
        # `fdesetup isactive` exits 0 only when FileVault is on
        return self.runner.run([self.tool, "isactive"], timeout=30).ok

    def disable(self) -> Receipt:
        return self.runner.run([self.tool, "disable"], sudo=True, capture=False)


class FullDiskAccessAdapter(HostAdapter):
    """Probe and prompt for the Full Disk Access privacy permission."""

    @property
    def name(self) -> str:
        return "full-disk-access"

    @property
    def tool(self) -> str:
        return "osascript"

    def probe(self) -> bool:
        """True when the protected TCC database is readable."""
        return self.runner.run(["ls", TCC_DATABASE], timeout=30).ok

    def request(self, app_name: str) -> Receipt:
        """Show the explanation dialog, then trigger the system prompt."""
        dialog = self.runner.run(
            [self.tool], input=_FDA_PROMPT.format(app=app_name), timeout=300
        )
        if dialog.failed:
            logger.warning("Full Disk Access dialog failed: %s", dialog.error)
        # Expected to fail without access; it only exists to raise the prompt
        return self.runner.run(["sqlite3", TCC_DATABASE, ".tables"], sudo=True, timeout=300)
