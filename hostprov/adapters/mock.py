"""
Mock runner — universal test double for host commands and processes.

Records every command instead of executing it. By default every
command succeeds with empty output; responses can be configured per
command prefix, either as a single Receipt, a callable, or a sequence
consumed one call at a time (the last entry repeats).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Union

from hostprov.adapters.base import CommandRunner, ProcessHandle, ProcessLauncher
from hostprov.core.models.receipt import Receipt

Response = Union[Receipt, Callable[[list[str]], Receipt]]


@dataclass
class MockCall:
    """One recorded command."""

    command: list[str]
    sudo: bool = False
    cwd: Path | None = None
    input: str | None = None
    env: dict[str, str] = field(default_factory=dict)


class MockRunner(CommandRunner):
    """CommandRunner that records calls and returns scripted receipts."""

    def __init__(self, tools: set[str] | None = None, runner_name: str = "mock"):
        self._name = runner_name
        self._tools = set(tools) if tools is not None else set()
        self._responses: list[tuple[tuple[str, ...], list[Response]]] = []
        self._call_log: list[MockCall] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[MockCall]:
        """All commands this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def commands(self) -> list[list[str]]:
        return [c.command for c in self._call_log]

    def calls_to(self, *prefix: str) -> list[MockCall]:
        """Recorded calls whose command starts with ``prefix``."""
        return [c for c in self._call_log if tuple(c.command[: len(prefix)]) == prefix]

    def add_tool(self, *tools: str) -> None:
        self._tools.update(tools)

    def remove_tool(self, tool: str) -> None:
        self._tools.discard(tool)

    def which(self, tool: str) -> str | None:
        return f"/usr/bin/{tool}" if tool in self._tools else None

    def on(self, prefix: list[str] | tuple[str, ...], *responses: Response) -> None:
        """Script the responses for commands starting with ``prefix``.

        Later registrations win over earlier ones for the same prefix;
        longer prefixes win over shorter ones.
        """
        self._responses = [r for r in self._responses if r[0] != tuple(prefix)]
        self._responses.append((tuple(prefix), list(responses)))
        self._responses.sort(key=lambda r: len(r[0]), reverse=True)

    def set_output(self, prefix: list[str] | tuple[str, ...], *outputs: str) -> None:
        """Script successful outputs for commands starting with ``prefix``."""
        self.on(prefix, *[Receipt.success(list(prefix), output=o) for o in outputs])

    def set_failure(self, prefix: list[str] | tuple[str, ...], error: str = "Mock failure") -> None:
        """Configure commands starting with ``prefix`` to fail."""
        self.on(prefix, Receipt.failure(list(prefix), error=error, return_code=1))

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
        self._call_log.append(
            MockCall(command=list(command), sudo=sudo, cwd=cwd, input=input, env=dict(env or {}))
        )

        for prefix, queue in self._responses:
            if tuple(command[: len(prefix)]) != prefix:
                continue
            response = queue.pop(0) if len(queue) > 1 else queue[0]
            if callable(response):
                return response(list(command))
            return response.model_copy(update={"command": list(command)}, deep=True)

        return Receipt.success(list(command), metadata={"mock": True})

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._responses.clear()


class MockProcess(ProcessHandle):
    """ProcessHandle that only records whether it was stopped."""

    def __init__(self, pid: int = 4242, on_stop: Callable[[], None] | None = None):
        self._pid = pid
        self._running = True
        self._on_stop = on_stop
        self.stop_calls = 0

    @property
    def pid(self) -> int:
        return self._pid

    def is_running(self) -> bool:
        return self._running

    def exit(self) -> None:
        """Simulate the process exiting on its own."""
        self._running = False

    def stop(self, grace: float = 10.0) -> int | None:
        self.stop_calls += 1
        if self._running and self._on_stop is not None:
            self._on_stop()
        self._running = False
        return 0


class MockLauncher(ProcessLauncher):
    """ProcessLauncher that hands out MockProcess handles."""

    def __init__(self, fail_with: OSError | None = None):
        self._fail_with = fail_with
        self.launched: list[tuple[list[str], Path | None]] = []
        self.processes: list[MockProcess] = []

    def launch(
        self,
        command: list[str],
        *,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> ProcessHandle:
        if self._fail_with is not None:
            raise self._fail_with
        self.launched.append((list(command), cwd))
        proc = MockProcess(pid=4242 + len(self.processes))
        self.processes.append(proc)
        return proc
