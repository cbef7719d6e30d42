"""
Preflight — privilege and dependency checks before any mutation.

``check`` is pure inspection. ``acquire_sudo`` and ``SudoKeepAlive``
obtain and hold the sudo credential cache the later steps rely on.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from hostprov.adapters.base import CommandRunner
from hostprov.core.errors import MissingDependencyError, PrivilegeError

logger = logging.getLogger(__name__)

ROOT_UID = 0
KEEPALIVE_INTERVAL = 60.0


class PreflightChecker:
    """Validate identity and required tools."""

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    def check(self, euid: int, required_tools: Iterable[str]) -> None:
        """Fail fast if the run cannot proceed.

        Raises:
            PrivilegeError: If running as root.
            MissingDependencyError: For the first tool not on PATH.
        """
        if euid == ROOT_UID:
            raise PrivilegeError(
                "Please do not run this as root/sudo directly. Run it as a normal "
                "user; it will ask for sudo privileges."
            )

        for tool in required_tools:
            if self._runner.which(tool) is None:
                raise MissingDependencyError(tool)
            logger.debug("Found required command: %s", tool)

    def acquire_sudo(self) -> None:
        """Prompt for (or validate) the sudo credential up front."""
        logger.info("Requesting sudo privileges...")
        receipt = self._runner.run(["sudo", "-v"], capture=False)
        if receipt.failed:
            raise PrivilegeError(f"Failed to obtain sudo privileges: {receipt.error}")


class SudoKeepAlive:
    """Refresh the sudo timestamp in the background while a run is active.

    Usage:
        with SudoKeepAlive(runner):
            ...  # long steps that call sudo
    """

    def __init__(self, runner: CommandRunner, interval: float = KEEPALIVE_INTERVAL):
        self._runner = runner
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.refreshes = 0

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            receipt = self._runner.run(["sudo", "-n", "true"], timeout=30)
            self.refreshes += 1
            if receipt.failed:
                logger.debug("sudo keep-alive refresh failed: %s", receipt.error)

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop, name="sudo-keepalive", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None

    def __enter__(self) -> SudoKeepAlive:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
