"""Adapters — tool bindings for the host the provisioner configures.

Public re-exports for convenient access.
"""

from hostprov.adapters.base import CommandRunner, HostAdapter, ProcessHandle, ProcessLauncher
from hostprov.adapters.mock import MockLauncher, MockProcess, MockRunner
from hostprov.adapters.registry import Host

__all__ = [
    "CommandRunner",
    "Host",
    "HostAdapter",
    "MockLauncher",
    "MockProcess",
    "MockRunner",
    "ProcessHandle",
    "ProcessLauncher",
]
