"""
Domain models — Pydantic types for the provisioner.

All models are re-exported here for convenient access:

    from hostprov.core.models import RunConfig, Settings, ServiceDescriptor, Receipt
"""

from hostprov.core.models.config import (
    PackageSettings,
    RunConfig,
    ServiceSettings,
    Settings,
    TransferSettings,
)
from hostprov.core.models.receipt import Receipt
from hostprov.core.models.service import ServiceDescriptor

__all__ = [
    "PackageSettings",
    "Receipt",
    "RunConfig",
    "ServiceDescriptor",
    "ServiceSettings",
    "Settings",
    "TransferSettings",
]
