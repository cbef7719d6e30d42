"""
Tests for the transfer engine — rsync with bounded exponential backoff.
"""

from pathlib import Path

import pytest

from hostprov.core.errors import TransferExhaustedError
from hostprov.core.models.receipt import Receipt
from hostprov.core.services.transfer import TransferEngine


def _rsync_fail(error: str = "connection reset") -> Receipt:
    return Receipt.failure(["rsync"], error=error, return_code=12)


class TestTransferEngine:
    def test_first_attempt_success(self, host, runner, clock, tmp_path: Path):
        engine = TransferEngine(host, sleep=clock.sleep)
        attempts = engine.transfer("models@box:/models/", tmp_path, max_attempts=3, base_delay=10)

        assert len(attempts) == 1
        assert clock.sleeps == []
        cmd = runner.calls_to("rsync")[0].command
        assert "--partial" in cmd
        assert "-a" in cmd
        assert cmd[-2:] == ["models@box:/models/", str(tmp_path)]

    def test_fails_twice_then_succeeds(self, host, runner, clock, tmp_path: Path):
        runner.on(["rsync"], _rsync_fail(), _rsync_fail(), Receipt.success(["rsync"]))
        engine = TransferEngine(host, sleep=clock.sleep)

        attempts = engine.transfer("src/", tmp_path, max_attempts=3, base_delay=10)

        assert len(runner.calls_to("rsync")) == 3
        assert clock.sleeps == [10, 20]
        assert clock.elapsed >= 30
        assert attempts[-1].ok
        assert not attempts[0].ok

    def test_always_failing_exhausts(self, host, runner, clock, tmp_path: Path):
        runner.on(["rsync"], _rsync_fail("Connection refused"))
        engine = TransferEngine(host, sleep=clock.sleep)

        with pytest.raises(TransferExhaustedError) as exc_info:
            engine.transfer("src/", tmp_path, max_attempts=3, base_delay=10)

        assert len(runner.calls_to("rsync")) == 3
        assert clock.sleeps == [10, 20]
        assert exc_info.value.attempts == 3
        assert "Connection refused" in str(exc_info.value.last_error)
        assert "Connection refused" in str(exc_info.value)
        assert exc_info.value.step == "transfer"

    def test_io_timeout_passed_to_rsync(self, runner, launcher, clock, tmp_path: Path):
        from hostprov.adapters.registry import Host

        host = Host.create(runner, launcher, rsync_io_timeout=15)
        TransferEngine(host, sleep=clock.sleep).transfer("a/", tmp_path)
        assert "--timeout=15" in runner.calls_to("rsync")[0].command
