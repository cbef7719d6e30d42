"""
Tests for preflight — identity, tools, sudo credential handling.
"""

import time

import pytest

from hostprov.adapters.mock import MockRunner
from hostprov.core.errors import MissingDependencyError, PrivilegeError
from hostprov.core.services.preflight import PreflightChecker, SudoKeepAlive


class TestPreflightCheck:
    def test_passes_for_normal_user_with_tools(self, runner: MockRunner):
        PreflightChecker(runner).check(501, ["curl", "git", "rsync"])
        assert runner.call_count == 0  # inspection only

    def test_root_rejected(self, runner: MockRunner):
        with pytest.raises(PrivilegeError) as exc_info:
            PreflightChecker(runner).check(0, ["curl"])
        assert "root" in str(exc_info.value)

    def test_missing_tool_named(self, runner: MockRunner):
        runner.remove_tool("rsync")
        with pytest.raises(MissingDependencyError) as exc_info:
            PreflightChecker(runner).check(501, ["curl", "git", "rsync"])
        assert exc_info.value.tool == "rsync"
        assert "'rsync'" in str(exc_info.value)
        assert exc_info.value.step == "preflight"

    def test_root_checked_before_tools(self):
        with pytest.raises(PrivilegeError):
            PreflightChecker(MockRunner(tools=set())).check(0, ["curl"])


class TestSudo:
    def test_acquire(self, runner: MockRunner):
        PreflightChecker(runner).acquire_sudo()
        assert runner.commands == [["sudo", "-v"]]

    def test_acquire_failure(self, runner: MockRunner):
        runner.set_failure(["sudo", "-v"], "Sorry, try again.")
        with pytest.raises(PrivilegeError) as exc_info:
            PreflightChecker(runner).acquire_sudo()
        assert "Sorry" in str(exc_info.value)

    def test_keepalive_refreshes_until_stopped(self, runner: MockRunner):
        with SudoKeepAlive(runner, interval=0.01) as keepalive:
            deadline = time.monotonic() + 2.0
            while keepalive.refreshes < 2 and time.monotonic() < deadline:
                time.sleep(0.01)

        assert keepalive.refreshes >= 2
        count = len(runner.calls_to("sudo", "-n", "true"))
        time.sleep(0.05)
        assert len(runner.calls_to("sudo", "-n", "true")) == count
