"""
Service registrar — build the service descriptor and install it.

Registration is idempotent in effect: each run overwrites the
descriptor file. It never loads or starts the daemon.
"""

from __future__ import annotations

import logging

from hostprov.adapters.registry import Host
from hostprov.core.errors import ServiceRegistrationError
from hostprov.core.models.config import RunConfig
from hostprov.core.models.service import ServiceDescriptor

logger = logging.getLogger(__name__)


def build_service_descriptor(config: RunConfig) -> ServiceDescriptor:
    """Derive the daemon's descriptor from the run configuration."""
    service = config.settings.service
    return ServiceDescriptor(
        label=service.label,
        program_arguments=list(service.program),
        working_directory=config.checkout_dir,
        stdout_path=config.log_dir / service.stdout_log,
        stderr_path=config.log_dir / service.stderr_log,
        user_name=config.user,
    )


class ServiceRegistrar:
    """Install service descriptors through the launchd adapter."""

    def __init__(self, host: Host):
        self._host = host

    def register_service(self, descriptor: ServiceDescriptor) -> str:
        """Write the descriptor and create its log directories.

        Returns:
            Path of the installed descriptor file.

        Raises:
            ServiceRegistrationError: If a log directory or the descriptor
                cannot be written.
        """
        logger.info("Setting up %s as a LaunchDaemon...", descriptor.label)

        for log_dir in descriptor.log_directories:
            try:
                log_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ServiceRegistrationError(
                    f"Failed to create log directory {log_dir}: {e}"
                ) from e

        receipt = self._host.launchd.install(descriptor)
        if receipt.failed:
            raise ServiceRegistrationError(
                f"Failed to write service descriptor {receipt.metadata.get('path')}: {receipt.error}"
            )

        path = receipt.metadata["path"]
        logger.info("Service descriptor written to %s", path)
        return path
