"""
Completion watcher — detect that the consumer has drained the staging area.

The producer (this provisioner) and the consumer (the service) share
nothing but the staging directory. The consumer's contract is to
empty it once the data is ingested; the watcher only observes the
count of remaining files reaching zero, never which files went.

State machine:

    WAITING ──drained──────────▶ COMPLETE   (stop consumer if we launched it)
    WAITING ──not drained──────▶ WAITING    (sleep interval, re-check)
    WAITING ──elapsed≥timeout──▶ TIMED_OUT  (TransferTimeoutError)

Polling is wrapped in the CompletionSignal abstraction so a consumer
that can signal completion directly can replace the filesystem probe.
"""

from __future__ import annotations

import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from hostprov.adapters.base import ProcessHandle
from hostprov.core.errors import ProvisionError, TransferTimeoutError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], None]


class WatchState(str, Enum):
    WAITING = "waiting"
    COMPLETE = "complete"
    TIMED_OUT = "timed_out"


@dataclass
class WatchResult:
    """Terminal state of a watch, with the poll cycle that reached it."""

    state: WatchState
    elapsed: float = 0.0
    polls: int = 0
    remaining: int = 0

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "elapsed": self.elapsed,
            "polls": self.polls,
            "remaining": self.remaining,
        }


class CompletionSignal(ABC):
    """Capability: has the downstream consumer finished with the data?"""

    @abstractmethod
    def is_drained(self) -> bool:
        """Whether the consumer has taken everything."""

    def remaining(self) -> int:
        """Items still waiting to be consumed, if known."""
        return 0

    def await_drained(
        self,
        interval: float,
        timeout: float,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = time.sleep,
    ) -> WatchResult:
        """Poll ``is_drained`` every ``interval`` seconds until ``timeout``.

        Each check follows a sleep, so the first one happens at
        ``interval``. The watch ends on the first drained check, or on
        the first check at or past the timeout. Never raises for a
        timeout; returns TIMED_OUT.
        """
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")

        start = clock()
        polls = 0

        while True:
            sleep(interval)
            elapsed = clock() - start
            polls += 1

            if self.is_drained():
                return WatchResult(WatchState.COMPLETE, elapsed=elapsed, polls=polls)

            if elapsed >= timeout:
                return WatchResult(
                    WatchState.TIMED_OUT,
                    elapsed=elapsed,
                    polls=polls,
                    remaining=self.remaining(),
                )

            logger.debug(
                "Waiting for consumer: %d item(s) left after %.0fs",
                self.remaining(),
                elapsed,
            )


def _walk_error(error: OSError) -> None:
    # The consumer deletes as it goes; a vanished subdirectory is progress
    if not isinstance(error, FileNotFoundError):
        raise error


class StagingDirectorySignal(CompletionSignal):
    """Drained when the staging directory holds no visible regular files.

    Dotfiles (and anything under a dot-directory) are ignored; a
    directory that no longer exists counts as drained.
    """

    def __init__(self, path: Path):
        self.path = path

    def remaining(self) -> int:
        """Count visible regular files.

        Raises:
            OSError: If part of the tree cannot be read, since an
                unreadable directory cannot be shown to be empty.
        """
        if not self.path.is_dir():
            return 0
        count = 0
        for dirpath, dirnames, filenames in os.walk(self.path, onerror=_walk_error):
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            for name in filenames:
                if name.startswith("."):
                    continue
                full = os.path.join(dirpath, name)
                if os.path.isfile(full) and not os.path.islink(full):
                    count += 1
        return count

    def is_drained(self) -> bool:
        return self.remaining() == 0


class CompletionWatcher:
    """Drive a CompletionSignal to a terminal state."""

    def __init__(
        self,
        signal: CompletionSignal,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = time.sleep,
    ):
        self._signal = signal
        self._clock = clock
        self._sleep = sleep
        self.state = WatchState.WAITING

    def watch(
        self,
        interval: float,
        timeout: float,
        consumer: ProcessHandle | None = None,
    ) -> WatchResult:
        """Wait for the drain; stop ``consumer`` (if given) on completion.

        Raises:
            TransferTimeoutError: If the timeout is reached first.
            ProvisionError: If the signal cannot be read.
        """
        self.state = WatchState.WAITING
        logger.info(
            "Waiting for the service to consume staged data (poll %.0fs, timeout %.0fs)...",
            interval,
            timeout,
        )

        try:
            result = self._signal.await_drained(
                interval, timeout, clock=self._clock, sleep=self._sleep
            )
        except OSError as e:
            raise ProvisionError(f"Failed to inspect staging area: {e}", step="completion") from e
        self.state = result.state

        if result.state is WatchState.TIMED_OUT:
            raise TransferTimeoutError(result.elapsed, timeout, result.remaining)

        logger.info("Staged data consumed after %.0fs", result.elapsed)
        if consumer is not None and consumer.is_running():
            consumer.stop()
        return result
