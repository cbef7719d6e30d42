"""
Process launcher — start the downstream consumer as an independent child.

The provisioner owns only the launch and an eventual stop signal;
it never reads the child's output or waits for it to finish.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from pathlib import Path

from hostprov.adapters.base import ProcessHandle, ProcessLauncher

logger = logging.getLogger(__name__)


class PopenHandle(ProcessHandle):
    """ProcessHandle backed by ``subprocess.Popen``."""

    def __init__(self, proc: subprocess.Popen):
        self._proc = proc

    @property
    def pid(self) -> int:
        return self._proc.pid

    def is_running(self) -> bool:
        return self._proc.poll() is None

    def stop(self, grace: float = 10.0) -> int | None:
        if not self.is_running():
            return self._proc.returncode

        logger.info("Stopping process %d...", self.pid)
        self._proc.send_signal(signal.SIGTERM)
        try:
            return self._proc.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            logger.warning("Process %d ignored SIGTERM for %.0fs — killing", self.pid, grace)
            self._proc.kill()
            try:
                return self._proc.wait(timeout=grace)
            except subprocess.TimeoutExpired:
                logger.error("Process %d could not be reaped", self.pid)
                return None


class SubprocessLauncher(ProcessLauncher):
    """Launch children with ``subprocess.Popen``."""

    def launch(
        self,
        command: list[str],
        *,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> ProcessHandle:
        run_env = None
        if env:
            run_env = os.environ.copy()
            run_env.update(env)

        proc = subprocess.Popen(
            command,
            cwd=str(cwd) if cwd else None,
            env=run_env,
            stdin=subprocess.DEVNULL,
        )
        logger.info("Started %s (pid %d)", command[0], proc.pid)
        return PopenHandle(proc)
