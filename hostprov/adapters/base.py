"""
Adapter base — the protocol contract between services and the host.

Services never call ``subprocess`` directly. They talk to a
CommandRunner (one-shot commands that come back as Receipts) and a
ProcessLauncher (long-running children with a stop capability).
Swapping both for the mock implementations makes every service
testable without touching the machine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from hostprov.core.models.receipt import Receipt


class CommandRunner(ABC):
    """Abstract base class for host command execution.

    Runners perform external side effects and return receipts.
    They NEVER raise for a failed command — failures are captured
    in the Receipt with status='failed'.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def which(self, tool: str) -> str | None:
        """Resolve a tool on PATH. Should be fast and never raise."""

    @abstractmethod
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
        """Run a command to completion and return a receipt.

        Args:
            command: argv list, never a shell string.
            sudo: Prefix with sudo unless already running as root.
            cwd: Working directory for the command.
            timeout: Seconds before the command is abandoned (None = no limit).
            input: Text fed to stdin.
            env: Extra environment variables layered over the process env.
            capture: If False, output streams straight to the terminal.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class HostAdapter(ABC):
    """Base class for tool bindings built on a CommandRunner.

    To create a new adapter:
        1. Subclass HostAdapter
        2. Implement name and tool
        3. Add operations that return Receipts
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'git', 'launchd')."""

    @property
    @abstractmethod
    def tool(self) -> str:
        """Executable the adapter drives."""

    def is_available(self) -> bool:
        """Whether the underlying tool is on PATH."""
        return self.runner.which(self.tool) is not None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class ProcessHandle(ABC):
    """A child process the provisioner launched and may stop."""

    @property
    @abstractmethod
    def pid(self) -> int:
        """Operating system process id."""

    @abstractmethod
    def is_running(self) -> bool:
        """Whether the process has not exited yet."""

    @abstractmethod
    def stop(self, grace: float = 10.0) -> int | None:
        """Ask the process to exit; force it after ``grace`` seconds.

        Returns the exit code, or None if it could not be collected.
        """


class ProcessLauncher(ABC):
    """Starts independent long-running processes."""

    @abstractmethod
    def launch(
        self,
        command: list[str],
        *,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> ProcessHandle:
        """Start ``command`` without waiting for it.

        Raises:
            OSError: If the executable cannot be started.
        """
