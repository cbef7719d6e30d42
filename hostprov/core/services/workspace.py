"""
Workspace manager — working directory, pinned checkout, runtime env.

Safe to re-run: directories and checkouts that already exist are
left alone, but the version pin is rewritten on every run so the
pin in settings is always authoritative.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hostprov.adapters.registry import Host
from hostprov.core.errors import WorkspaceError

logger = logging.getLogger(__name__)

VERSION_PIN_FILE = ".python-version"


class WorkspaceManager:
    """Prepare the directory tree the service runs from."""

    def __init__(self, host: Host):
        self._host = host

    def ensure_workspace(self, path: Path) -> Path:
        """Create ``path`` if absent and return it as the working context."""
        logger.info("Setting up workspace...")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceError(f"Failed to create workspace directory {path}: {e}") from e
        if not path.is_dir():
            raise WorkspaceError(f"Workspace path is not a directory: {path}")
        return path

    def ensure_checkout(self, repo_url: str, dest_dir: Path, version_pin: str) -> bool:
        """Clone ``repo_url`` into ``dest_dir`` unless a checkout is there.

        Returns:
            True if a clone was performed.
        """
        git = self._host.git
        cloned = False

        if git.is_checkout(dest_dir):
            logger.info("Checkout already present at %s", dest_dir)
        else:
            logger.info("Cloning %s...", repo_url)
            receipt = git.clone(repo_url, dest_dir)
            if receipt.failed:
                raise WorkspaceError(f"Failed to clone {repo_url}: {receipt.error}")
            cloned = True

        pin_file = dest_dir / VERSION_PIN_FILE
        try:
            pin_file.write_text(f"{version_pin}\n", encoding="utf-8")
        except OSError as e:
            raise WorkspaceError(f"Failed to set Python version: {e}") from e
        logger.debug("Pinned runtime %s in %s", version_pin, pin_file)
        return cloned

    def ensure_runtime_environment(self, checkout_dir: Path) -> None:
        """Create the virtualenv and install the checkout into it."""
        uv = self._host.uv
        logger.info("Installing %s...", checkout_dir.name)

        receipt = uv.venv(checkout_dir)
        if receipt.failed:
            raise WorkspaceError(f"Failed to create virtualenv: {receipt.error}")

        receipt = uv.install_editable(checkout_dir)
        if receipt.failed:
            raise WorkspaceError(f"Failed to install {checkout_dir.name}: {receipt.error}")
