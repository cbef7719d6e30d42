"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from hostprov.adapters.mock import MockLauncher, MockRunner
from hostprov.adapters.registry import Host
from hostprov.core.config.loader import build_run_config
from hostprov.core.models.config import RunConfig, Settings

HOST_TOOLS = {
    "curl", "git", "rsync", "brew", "uv", "systemsetup",
    "defaults", "pmset", "fdesetup", "osascript", "launchctl",
}


class FakeClock:
    """Monotonic clock that only moves when something sleeps on it."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.start = start
        self.sleeps: list[float] = []
        self.hooks: list = []

    def __call__(self) -> float:
        return self.now

    @property
    def elapsed(self) -> float:
        return self.now - self.start

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        for hook in self.hooks:
            hook(self.elapsed)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def runner() -> MockRunner:
    """A MockRunner describing an already-configured, healthy host."""
    mock = MockRunner(tools=set(HOST_TOOLS))
    mock.set_output(["systemsetup", "-getremotelogin"], "Remote Login: On")
    mock.set_failure(["fdesetup", "isactive"], "FileVault is Off.")
    return mock


@pytest.fixture
def launcher() -> MockLauncher:
    return MockLauncher()


@pytest.fixture
def host(runner: MockRunner, launcher: MockLauncher, tmp_path: Path) -> Host:
    return Host.create(runner, launcher, descriptor_dir=tmp_path / "LaunchDaemons")


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def run_config(home: Path) -> RunConfig:
    return build_run_config(Settings(), home=home, user="tester")


@pytest.fixture
def staging(tmp_path: Path) -> Path:
    """A staging directory holding a small model tree."""
    path = tmp_path / "staging"
    (path / "llama" / "weights").mkdir(parents=True)
    (path / "llama" / "config.json").write_text("{}")
    (path / "llama" / "weights" / "shard-0.bin").write_bytes(b"\x00" * 16)
    return path
