"""
Host registry — one object holding every adapter a run needs.

Services receive the Host rather than constructing adapters, so a
test can build the whole set around a MockRunner in one call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from hostprov.adapters.base import CommandRunner, ProcessLauncher
from hostprov.adapters.languages.uv import UvAdapter
from hostprov.adapters.macos.homebrew import HomebrewAdapter
from hostprov.adapters.macos.launchd import LaunchdAdapter
from hostprov.adapters.macos.remote_login import RemoteLoginAdapter
from hostprov.adapters.macos.system import (
    DefaultsAdapter,
    FileVaultAdapter,
    FullDiskAccessAdapter,
    PowerAdapter,
)
from hostprov.adapters.transfer.rsync import RsyncAdapter
from hostprov.adapters.vcs.git import GitAdapter

logger = logging.getLogger(__name__)


@dataclass
class Host:
    """Adapters bound to a single runner and process launcher."""

    runner: CommandRunner
    launcher: ProcessLauncher
    remote_login: RemoteLoginAdapter
    homebrew: HomebrewAdapter
    launchd: LaunchdAdapter
    defaults: DefaultsAdapter
    power: PowerAdapter
    filevault: FileVaultAdapter
    full_disk_access: FullDiskAccessAdapter
    git: GitAdapter
    uv: UvAdapter
    rsync: RsyncAdapter

    @classmethod
    def create(
        cls,
        runner: CommandRunner,
        launcher: ProcessLauncher,
        *,
        descriptor_dir: Path = Path("/Library/LaunchDaemons"),
        rsync_io_timeout: int = 60,
    ) -> Host:
        homebrew = HomebrewAdapter(runner)
        return cls(
            runner=runner,
            launcher=launcher,
            remote_login=RemoteLoginAdapter(runner),
            homebrew=homebrew,
            launchd=LaunchdAdapter(runner, descriptor_dir=descriptor_dir),
            defaults=DefaultsAdapter(runner),
            power=PowerAdapter(runner),
            filevault=FileVaultAdapter(runner),
            full_disk_access=FullDiskAccessAdapter(runner),
            git=GitAdapter(runner),
            uv=UvAdapter(runner, homebrew=homebrew),
            rsync=RsyncAdapter(runner, io_timeout=rsync_io_timeout),
        )
