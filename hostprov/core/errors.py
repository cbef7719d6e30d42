"""
Error taxonomy — one exception type per failing provisioning step.

Every step failure is fatal to the run. The CLI catches
``ProvisionError`` and reports ``str(error)`` together with ``step``
as the single terminal diagnostic line.
"""

from __future__ import annotations


class ProvisionError(Exception):
    """Base class for all provisioning failures."""

    step = "provision"

    def __init__(self, message: str, *, step: str | None = None):
        super().__init__(message)
        if step is not None:
            self.step = step


class SettingsError(ProvisionError):
    """Raised when the settings file is unreadable or invalid."""

    step = "settings"


class PrivilegeError(ProvisionError):
    """Running with a disallowed identity, or sudo could not be obtained."""

    step = "preflight"


class MissingDependencyError(ProvisionError):
    """A required external tool is not on PATH."""

    step = "preflight"

    def __init__(self, tool: str):
        super().__init__(f"Required command '{tool}' not found")
        self.tool = tool


class ConfigurationError(ProvisionError):
    """A system setting could not be applied or verified."""

    step = "configure"


class PackageInstallError(ProvisionError):
    """A batched package manager invocation failed."""

    step = "packages"

    def __init__(self, invocation: str, detail: str = ""):
        message = f"Package installation failed: {invocation}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.invocation = invocation


class WorkspaceError(ProvisionError):
    """Workspace directory, checkout, or runtime environment failure."""

    step = "workspace"


class ServiceRegistrationError(ProvisionError):
    """The service descriptor could not be rendered or installed."""

    step = "service"


class TransferExhaustedError(ProvisionError):
    """Every transfer attempt failed."""

    step = "transfer"

    def __init__(self, attempts: int, last_error: BaseException | str):
        super().__init__(
            f"Transfer failed after {attempts} attempt(s): {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error


class TransferTimeoutError(ProvisionError):
    """The consumer did not drain the staging area before the timeout."""

    step = "completion"

    def __init__(self, elapsed: float, timeout: float, remaining: int = 0):
        super().__init__(
            f"Staging area not drained after {elapsed:.0f}s "
            f"(timeout {timeout:.0f}s, {remaining} file(s) left)"
        )
        self.elapsed = elapsed
        self.timeout = timeout
        self.remaining = remaining
