"""
Transfer engine — copy a directory tree into the staging area with
bounded exponential-backoff retries.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from hostprov.adapters.registry import Host
from hostprov.core.errors import TransferExhaustedError
from hostprov.core.reliability.retry import Attempt, RetryExhausted, RetryPolicy, retry_call

logger = logging.getLogger(__name__)


class CopyFailed(Exception):
    """One copy attempt failed; carries the underlying command error."""


class TransferEngine:
    """Resumable bulk copy driven by a RetryPolicy."""

    def __init__(self, host: Host, sleep: Callable[[float], None] = time.sleep):
        self._host = host
        self._sleep = sleep

    def _copy_once(self, source: str, destination: Path) -> None:
        receipt = self._host.rsync.copy(source, destination)
        if receipt.failed:
            raise CopyFailed(receipt.error or f"rsync exited with code {receipt.return_code}")

    def transfer(
        self,
        source: str,
        destination: Path,
        max_attempts: int = 3,
        base_delay: float = 10.0,
    ) -> list[Attempt]:
        """Copy ``source`` into ``destination``.

        Waits ``base_delay * 2 ** (n - 1)`` after failed attempt n,
        for at most ``max_attempts`` attempts in total.

        Returns:
            The attempt history, ending with the successful attempt.

        Raises:
            TransferExhaustedError: After the final failed attempt, with the
                last underlying error attached.
        """
        policy = RetryPolicy(max_attempts=max_attempts, base_delay=base_delay)
        logger.info("Syncing from %s...", source)

        try:
            outcome = retry_call(
                lambda: self._copy_once(source, destination),
                policy,
                sleep=self._sleep,
                retry_on=(CopyFailed,),
                label="Transfer",
            )
        except RetryExhausted as e:
            raise TransferExhaustedError(len(e.attempts), e.last_error) from e

        logger.info("Transfer complete after %d attempt(s)", len(outcome.attempts))
        return outcome.attempts
