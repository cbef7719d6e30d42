"""
Shell command runner — execute host commands and capture their output.

This is the SINGLE PLACE where ``subprocess.run`` is called. Sudo
prefixing, environment layering, timeouts and error capture are
centralised here; every other adapter is built on top of it.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path

from hostprov.adapters.base import CommandRunner
from hostprov.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

# Keep receipts small: only the tail of long outputs is retained
_OUTPUT_TAIL = 2000


class ShellRunner(CommandRunner):
    """Run argv commands via ``subprocess.run``."""

    @property
    def name(self) -> str:
        return "shell"

    def which(self, tool: str) -> str | None:
        return shutil.which(tool)

    def run(
        self,
        command: list[str],
        *,
        sudo: bool = False,
        cwd: Path | None = None,
        timeout: float | None = None,
        input: str | None = None,
        env: dict[str, str] | None = None,
        capture: bool = True,
    ) -> Receipt:
        cmd = list(command)
        if sudo and os.geteuid() != 0:
            cmd = ["sudo"] + cmd

        run_env = None
        if env:
            run_env = os.environ.copy()
            run_env.update(env)

        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                capture_output=capture,
                text=True,
                timeout=timeout,
                input=input,
                env=run_env,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                cmd,
                error=f"Command timed out after {timeout}s",
                metadata={"timeout": timeout},
            )
        except OSError as e:
            return Receipt.failure(cmd, error=f"Command execution error: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = (result.stdout or "").strip()[-_OUTPUT_TAIL:]
        stderr = (result.stderr or "").strip()[-_OUTPUT_TAIL:]

        if result.returncode == 0:
            return Receipt.success(
                cmd,
                output=output,
                return_code=0,
                duration_ms=elapsed_ms,
                metadata={"stderr": stderr} if stderr else {},
            )

        return Receipt.failure(
            cmd,
            error=stderr or f"Command exited with code {result.returncode}",
            output=output,
            return_code=result.returncode,
            duration_ms=elapsed_ms,
        )
