"""
Settings and RunConfig — what the provisioner is asked to do.

``Settings`` is the user-editable layer (``hostprov.yml``); every field
has a default that reproduces the stock exo host install. ``RunConfig``
is the immutable value built once at startup from Settings, the
command line, and the invoking user's environment. It is threaded
through every service call; no service reads the environment itself.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Placeholder substituted with the staging directory in consumer commands
STAGING_PLACEHOLDER = "{staging}"


class PackageSettings(BaseModel):
    """Package sets installed as two all-or-nothing batches."""

    casks: list[str] = Field(default_factory=lambda: ["brave-browser", "iterm2"])
    formulae: list[str] = Field(default_factory=lambda: ["mactop", "tmux", "uv"])


class ServiceSettings(BaseModel):
    """How the long-running daemon is registered."""

    label: str = "io.focused.exo"
    program: list[str] = Field(
        default_factory=lambda: ["/opt/homebrew/bin/uv", "run", "exo", "--disable-tui"]
    )
    log_name: str = "exo"
    stdout_log: str = "exo.log"
    stderr_log: str = "error.log"
    descriptor_dir: str = "/Library/LaunchDaemons"


class TransferSettings(BaseModel):
    """Bulk transfer retry policy and completion polling."""

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=10.0, ge=0)
    io_timeout: int = Field(default=60, ge=1)
    poll_interval: float = Field(default=10.0, gt=0)
    completion_timeout: float = Field(default=3600.0, gt=0)
    consumer_command: list[str] = Field(
        default_factory=lambda: [
            "uv", "run", "exo",
            "--models-seed-dir", STAGING_PLACEHOLDER,
            "--disable-tui",
            "--prompt", "Say 'Models Moved' Nothing else.",
        ]
    )


class Settings(BaseModel):
    """Root of ``hostprov.yml``."""

    model_config = ConfigDict(extra="forbid")

    workspace_dir: str = "~/workspace"
    repository: str = "https://github.com/exo-explore/exo.git"
    checkout_name: str = "exo"
    runtime_version: str = "3.12"
    required_tools: list[str] = Field(default_factory=lambda: ["curl", "git", "rsync"])

    full_disk_access: bool = True
    power_settings: bool = True
    autologin: bool = True

    packages: PackageSettings = Field(default_factory=PackageSettings)
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    transfer: TransferSettings = Field(default_factory=TransferSettings)


class RunConfig(BaseModel):
    """Immutable per-run configuration."""

    model_config = ConfigDict(frozen=True)

    home: Path
    user: str
    workspace: Path
    repository: str
    checkout_dir: Path
    version_pin: str
    remote_source: str = ""
    settings: Settings = Field(default_factory=Settings)

    @property
    def transfer_requested(self) -> bool:
        """True iff a remote source location was supplied."""
        return bool(self.remote_source)

    @property
    def log_dir(self) -> Path:
        """Directory holding the service's stdout/stderr logs."""
        return self.home / ".local" / "var" / "log" / self.settings.service.log_name

    @property
    def audit_path(self) -> Path:
        return self.workspace / ".hostprov" / "audit.ndjson"
