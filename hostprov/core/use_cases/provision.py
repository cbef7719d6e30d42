"""
Provision use case — turn this machine into a running service host.

This is the top-level orchestrator: it threads one immutable RunConfig
through every step in order, stops at the first failure, and — when a
remote source was given — stages the data, launches the consumer and
waits for it to drain the staging area.

Flow:
    preflight → configure → workspace → register service
        → (transfer → launch consumer → watch) → cleanup

Everything opened during a run (sudo keep-alive, staging area,
consumer process) is entered on one ExitStack, so it is released on
every exit path, including interrupts.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable

from hostprov.adapters.base import ProcessHandle
from hostprov.adapters.registry import Host
from hostprov.core.errors import ProvisionError, TransferExhaustedError
from hostprov.core.models.config import STAGING_PLACEHOLDER, RunConfig
from hostprov.core.persistence.audit import AuditEntry, AuditWriter
from hostprov.core.reliability.retry import Attempt
from hostprov.core.services.completion import (
    CompletionWatcher,
    StagingDirectorySignal,
    WatchResult,
)
from hostprov.core.services.configurator import SystemConfigurator
from hostprov.core.services.preflight import PreflightChecker, SudoKeepAlive
from hostprov.core.services.registrar import ServiceRegistrar, build_service_descriptor
from hostprov.core.services.staging import staging_area
from hostprov.core.services.transfer import TransferEngine
from hostprov.core.services.workspace import WorkspaceManager

logger = logging.getLogger(__name__)


def generate_run_id() -> str:
    """Generate a unique run ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"run-{now}-{short}"


@dataclass
class ProvisionResult:
    """Outcome of a provisioning run."""

    run_id: str = ""
    steps: list[str] = field(default_factory=list)
    descriptor_path: str | None = None
    staging_path: Path | None = None
    transfer_attempts: list[Attempt] = field(default_factory=list)
    watch: WatchResult | None = None
    error: ProvisionError | None = None
    interrupted: bool = False
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and not self.interrupted

    @property
    def status(self) -> str:
        if self.interrupted:
            return "interrupted"
        return "ok" if self.error is None else "failed"

    def to_dict(self) -> dict:
        result: dict = {
            "run_id": self.run_id,
            "status": self.status,
            "steps": list(self.steps),
            "descriptor_path": self.descriptor_path,
            "transfer_attempts": [a.to_dict() for a in self.transfer_attempts],
            "watch": self.watch.to_dict() if self.watch else None,
            "duration_ms": self.duration_ms,
        }
        if self.error is not None:
            result["error"] = {"step": self.error.step, "message": str(self.error)}
        return result


def consumer_command(config: RunConfig, staging: Path) -> list[str]:
    """The consumer's argv with the staging directory substituted in."""
    return [
        arg.replace(STAGING_PLACEHOLDER, str(staging))
        for arg in config.settings.transfer.consumer_command
    ]


def _stop_if_running(handle: ProcessHandle) -> None:
    if handle.is_running():
        logger.info("Stopping consumer process %d", handle.pid)
        handle.stop()


class Provisioner:
    """Run every provisioning step against a Host."""

    def __init__(
        self,
        config: RunConfig,
        host: Host,
        *,
        euid: int,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        keep_sudo_alive: bool = True,
        staging_parent: Path | None = None,
    ):
        self.config = config
        self.host = host
        self.euid = euid
        self._clock = clock
        self._sleep = sleep
        self._keep_sudo_alive = keep_sudo_alive
        self._staging_parent = staging_parent

        self.preflight = PreflightChecker(host.runner)
        self.configurator = SystemConfigurator(host)
        self.workspace = WorkspaceManager(host)
        self.registrar = ServiceRegistrar(host)
        self.transfer_engine = TransferEngine(host, sleep=sleep)

    # ── Steps ───────────────────────────────────────────────────

    def _configure(self, result: ProvisionResult) -> None:
        settings = self.config.settings

        if settings.full_disk_access:
            self.configurator.ensure_full_disk_access(settings.checkout_name)
            result.steps.append("full-disk-access")

        self.configurator.ensure_remote_access_enabled()
        result.steps.append("remote-access")

        self.configurator.ensure_package_manager()
        self.configurator.ensure_package_set_installed(settings.packages.casks, cask=True)
        self.configurator.ensure_package_set_installed(settings.packages.formulae)
        result.steps.append("packages")

        if settings.power_settings:
            self.configurator.ensure_power_settings()
            result.steps.append("power-settings")

        if settings.autologin:
            self.configurator.ensure_autologin(self.config.user)
            result.steps.append("autologin")

    def _prepare_workspace(self, result: ProvisionResult) -> None:
        config = self.config
        self.workspace.ensure_workspace(config.workspace)
        self.workspace.ensure_checkout(config.repository, config.checkout_dir, config.version_pin)
        result.steps.append("checkout")

        self.workspace.ensure_runtime_environment(config.checkout_dir)
        result.steps.append("runtime")

    def _register(self, result: ProvisionResult) -> None:
        descriptor = build_service_descriptor(self.config)
        result.descriptor_path = self.registrar.register_service(descriptor)
        result.steps.append("service")

    def _transfer_and_watch(self, stack: ExitStack, result: ProvisionResult) -> None:
        config = self.config
        transfer = config.settings.transfer

        try:
            staging = stack.enter_context(staging_area(self._staging_parent))
        except OSError as e:
            raise ProvisionError(f"Failed to create staging area: {e}", step="transfer") from e
        result.staging_path = staging

        result.transfer_attempts = self.transfer_engine.transfer(
            config.remote_source,
            staging,
            max_attempts=transfer.max_attempts,
            base_delay=transfer.base_delay,
        )
        result.steps.append("transfer")

        command = consumer_command(config, staging)
        if "/" not in command[0]:
            command[0] = self.host.homebrew.program(command[0])
        logger.info("Starting %s with staged data...", config.settings.checkout_name)
        try:
            consumer = self.host.launcher.launch(command, cwd=config.checkout_dir)
        except OSError as e:
            raise ProvisionError(f"Failed to start consumer {command[0]}: {e}", step="consumer") from e
        stack.callback(_stop_if_running, consumer)

        watcher = CompletionWatcher(
            StagingDirectorySignal(staging), clock=self._clock, sleep=self._sleep
        )
        try:
            result.watch = watcher.watch(
                transfer.poll_interval, transfer.completion_timeout, consumer=consumer
            )
        finally:
            if result.watch is None:
                result.watch = WatchResult(watcher.state)
        result.steps.append("completion")

    # ── Run ─────────────────────────────────────────────────────

    def run(self) -> ProvisionResult:
        """Execute all steps; never raises ProvisionError.

        KeyboardInterrupt is recorded and re-raised after cleanup.
        """
        result = ProvisionResult(run_id=generate_run_id())
        started = time.monotonic()
        config = self.config

        try:
            with ExitStack() as stack:
                self.preflight.check(self.euid, config.settings.required_tools)
                result.steps.append("preflight")

                self.preflight.acquire_sudo()
                if self._keep_sudo_alive:
                    stack.enter_context(SudoKeepAlive(self.host.runner))
                result.steps.append("sudo")

                self._configure(result)
                self._prepare_workspace(result)
                self._register(result)

                if config.transfer_requested:
                    self._transfer_and_watch(stack, result)
                else:
                    logger.info("No remote location provided, skipping transfer")

        except ProvisionError as e:
            result.error = e
            logger.debug("Run aborted in step %s", e.step, exc_info=True)
        except KeyboardInterrupt:
            result.interrupted = True
            raise
        finally:
            result.duration_ms = int((time.monotonic() - started) * 1000)
            self._write_audit(result)

        return result

    def _write_audit(self, result: ProvisionResult) -> None:
        attempts = len(result.transfer_attempts)
        if isinstance(result.error, TransferExhaustedError):
            attempts = result.error.attempts

        entry = AuditEntry(
            run_id=result.run_id,
            status=result.status,
            steps=list(result.steps),
            transfer_requested=self.config.transfer_requested,
            transfer_attempts=attempts,
            watch_state=result.watch.state.value if result.watch else None,
            duration_ms=result.duration_ms,
            failed_step=result.error.step if result.error else None,
            error=str(result.error) if result.error else None,
            context={"descriptor_path": result.descriptor_path},
        )
        if not self.config.workspace.is_dir():
            logger.debug("Workspace %s missing — audit entry not written", self.config.workspace)
            return
        AuditWriter(self.config.audit_path).write(entry)


def provision(config: RunConfig, host: Host, *, euid: int, **kwargs) -> ProvisionResult:
    """Convenience wrapper: build a Provisioner and run it."""
    return Provisioner(config, host, euid=euid, **kwargs).run()
