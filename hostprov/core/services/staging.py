"""
Cleanup guard — the staging area's lifetime is exactly one run scope.

The staging directory is created on entry and removed on exit,
whatever the exit: normal return, a provisioning error, or an
interrupt. Nothing else deletes it.
"""

from __future__ import annotations

import logging
import shutil
import signal
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

STAGING_PREFIX = "hostprov-staging-"

# Signals turned into KeyboardInterrupt so they unwind through finally blocks
_TERMINATION_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


@contextmanager
def staging_area(parent: Path | None = None) -> Iterator[Path]:
    """Create a private staging directory and remove it on scope exit."""
    path = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=parent))
    logger.debug("Created staging area %s", path)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        if path.exists():
            logger.warning("Staging area %s could not be fully removed", path)
        else:
            logger.debug("Removed staging area %s", path)


def _raise_interrupt(signum: int, frame: object) -> None:
    raise KeyboardInterrupt(f"terminated by signal {signal.Signals(signum).name}")


@contextmanager
def termination_as_interrupt() -> Iterator[None]:
    """Convert SIGTERM/SIGHUP into KeyboardInterrupt for the block's duration.

    Only the main thread can install signal handlers; elsewhere this
    is a no-op.
    """
    previous: dict[int, object] = {}
    try:
        for signum in _TERMINATION_SIGNALS:
            previous[signum] = signal.signal(signum, _raise_interrupt)
    except ValueError:
        logger.debug("Not in main thread — termination signals left untouched")

    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
