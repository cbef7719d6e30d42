"""
Tests for host adapters — mock runner, real shell runner, command builders.
"""

import sys
from pathlib import Path

import pytest

from hostprov.adapters.macos.homebrew import DEFAULT_BREW_PATH, HomebrewAdapter
from hostprov.adapters.macos.remote_login import RemoteLoginAdapter
from hostprov.adapters.macos.system import PowerAdapter
from hostprov.adapters.mock import MockLauncher, MockRunner
from hostprov.adapters.registry import Host
from hostprov.adapters.shell.command import ShellRunner
from hostprov.adapters.shell.process import SubprocessLauncher
from hostprov.adapters.transfer.rsync import RsyncAdapter
from hostprov.core.models.receipt import Receipt

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX commands")


# ── MockRunner ───────────────────────────────────────────────────────


class TestMockRunner:
    def test_default_success_recorded(self):
        mock = MockRunner()
        receipt = mock.run(["echo", "hi"], sudo=True, cwd=Path("/tmp"))
        assert receipt.ok
        assert receipt.metadata["mock"] is True
        assert mock.call_log[0].sudo
        assert mock.call_log[0].cwd == Path("/tmp")

    def test_longest_prefix_wins(self):
        mock = MockRunner()
        mock.set_failure(["brew"])
        mock.set_output(["brew", "--version"], "Homebrew 4.3.0")
        assert mock.run(["brew", "--version"]).output == "Homebrew 4.3.0"
        assert mock.run(["brew", "install", "uv"]).failed

    def test_sequence_last_repeats(self):
        mock = MockRunner()
        mock.set_output(["pmset", "-g"], "one", "two")
        outputs = [mock.run(["pmset", "-g"]).output for _ in range(3)]
        assert outputs == ["one", "two", "two"]

    def test_response_copies_are_independent(self):
        mock = MockRunner()
        mock.set_output(["x"], "out")
        first = mock.run(["x"])
        first.metadata["enabled"] = True
        assert "enabled" not in mock.run(["x"]).metadata

    def test_callable_response(self):
        mock = MockRunner()
        mock.on(["echo"], lambda cmd: Receipt.success(cmd, output=" ".join(cmd[1:])))
        assert mock.run(["echo", "a", "b"]).output == "a b"

    def test_which(self):
        mock = MockRunner(tools={"git"})
        assert mock.which("git") == "/usr/bin/git"
        assert mock.which("rsync") is None
        mock.add_tool("rsync")
        assert mock.which("rsync") == "/usr/bin/rsync"


# ── ShellRunner ──────────────────────────────────────────────────────


@posix_only
class TestShellRunner:
    def test_success_captures_output(self):
        receipt = ShellRunner().run(["echo", "hello"])
        assert receipt.ok
        assert receipt.output == "hello"
        assert receipt.return_code == 0

    def test_nonzero_exit(self):
        receipt = ShellRunner().run(["sh", "-c", "echo oops >&2; exit 3"])
        assert receipt.failed
        assert receipt.return_code == 3
        assert receipt.error == "oops"

    def test_missing_binary(self):
        receipt = ShellRunner().run(["definitely-not-a-real-binary-xyz"])
        assert receipt.failed
        assert "execution error" in receipt.error

    def test_timeout(self):
        receipt = ShellRunner().run(["sleep", "5"], timeout=0.2)
        assert receipt.failed
        assert "timed out" in receipt.error

    def test_input_and_env(self, tmp_path: Path):
        receipt = ShellRunner().run(
            ["sh", "-c", 'cat; printf " $GREETING"'],
            input="hello",
            env={"GREETING": "world"},
            cwd=tmp_path,
        )
        assert receipt.output == "hello world"


@posix_only
class TestSubprocessLauncher:
    def test_launch_and_stop(self):
        handle = SubprocessLauncher().launch(["sleep", "30"])
        assert handle.is_running()
        handle.stop(grace=5)
        assert not handle.is_running()

    def test_stop_after_exit_is_noop(self):
        handle = SubprocessLauncher().launch(["true"])
        handle._proc.wait(timeout=5)
        assert handle.stop() == 0

    def test_missing_binary_raises(self):
        with pytest.raises(OSError):
            SubprocessLauncher().launch(["definitely-not-a-real-binary-xyz"])


# ── Command builders ─────────────────────────────────────────────────


class TestRemoteLogin:
    @pytest.mark.parametrize(
        "output, enabled",
        [("Remote Login: On", True), ("Remote Login: Off", False), ("", False)],
    )
    def test_query_parsing(self, output, enabled):
        mock = MockRunner()
        mock.set_output(["systemsetup"], output)
        assert RemoteLoginAdapter(mock).query().metadata["enabled"] is enabled

    def test_query_uses_sudo(self):
        mock = MockRunner()
        RemoteLoginAdapter(mock).query()
        assert mock.call_log[0].sudo


class TestHomebrew:
    def test_brew_path_resolution(self):
        assert HomebrewAdapter(MockRunner(tools={"brew"})).brew == "/usr/bin/brew"
        assert HomebrewAdapter(MockRunner()).brew == DEFAULT_BREW_PATH
        assert HomebrewAdapter(MockRunner(), brew_path="/x/brew").brew == "/x/brew"

    def test_install_streams_output(self):
        mock = MockRunner(tools={"brew"})
        HomebrewAdapter(mock).install(["tmux"], cask=False)
        assert mock.commands == [["/usr/bin/brew", "install", "tmux"]]


class TestPower:
    def test_current_parses_pmset(self):
        mock = MockRunner()
        mock.set_output(["pmset", "-g"], "System-wide power settings:\n displaysleep         10\n sleep 1")
        power = PowerAdapter(mock)
        assert power.current("displaysleep") == "10"
        assert power.current("disksleep") is None


class TestRsync:
    def test_copy_command(self, tmp_path: Path):
        mock = MockRunner()
        RsyncAdapter(mock, io_timeout=30).copy("box:/models/", tmp_path)
        assert mock.commands == [["rsync", "-a", "--partial", "--timeout=30", "box:/models/", str(tmp_path)]]


class TestProgramResolution:
    def test_program_on_path(self):
        mock = MockRunner(tools={"brew", "uv"})
        assert HomebrewAdapter(mock).program("uv") == "/usr/bin/uv"

    def test_program_falls_back_to_brew_prefix(self):
        assert HomebrewAdapter(MockRunner()).program("uv") == "/opt/homebrew/bin/uv"
        assert HomebrewAdapter(MockRunner(), brew_path="/usr/local/bin/brew").program("uv") == "/usr/local/bin/uv"

    def test_uv_resolved_per_call(self, tmp_path: Path):
        mock = MockRunner()
        host = Host.create(mock, MockLauncher())
        host.uv.venv(tmp_path)
        mock.add_tool("uv")
        host.uv.venv(tmp_path)
        assert [c.command[0] for c in mock.call_log] == ["/opt/homebrew/bin/uv", "/usr/bin/uv"]
