"""
System configurator — individually idempotent host settings.

Every step follows the same contract: query the current state, do
nothing if it already matches, otherwise mutate and (where the host
lets us observe it) query again to confirm. "Already done" is a
success, not a recovered error.
"""

from __future__ import annotations

import logging

from hostprov.adapters.registry import Host
from hostprov.core.errors import ConfigurationError, PackageInstallError

logger = logging.getLogger(__name__)

SCREENSAVER_DOMAIN = "com.apple.screensaver"
LOGINWINDOW_PLIST = "/Library/Preferences/com.apple.loginwindow"


class SystemConfigurator:
    """Apply named system-state changes through the host adapters."""

    def __init__(self, host: Host):
        self._host = host

    # ── Remote access ───────────────────────────────────────────

    def ensure_remote_access_enabled(self) -> bool:
        """Turn on remote login if it is off.

        Returns:
            True if a change was made, False if it was already enabled.

        Raises:
            ConfigurationError: If enabling fails or is not observed afterwards.
        """
        adapter = self._host.remote_login
        logger.info("Enabling SSH...")

        if adapter.query().metadata["enabled"]:
            logger.info("SSH is already enabled")
            return False

        receipt = adapter.enable()
        if receipt.failed:
            raise ConfigurationError(f"Failed to enable SSH: {receipt.error}")

        if not adapter.query().metadata["enabled"]:
            raise ConfigurationError("Failed to verify SSH is enabled")

        logger.info("SSH enabled successfully")
        return True

    # ── Packages ────────────────────────────────────────────────

    def ensure_package_manager(self) -> bool:
        """Install Homebrew if it is not usable yet.

        Returns:
            True if Homebrew was installed by this call.
        """
        brew = self._host.homebrew
        if brew.is_available():
            logger.debug("Homebrew already installed")
            return False

        receipt = brew.bootstrap()
        if receipt.failed:
            raise PackageInstallError("Homebrew installer", receipt.error or "")

        probe = brew.probe()
        if probe.failed:
            raise PackageInstallError(f"{brew.brew} --version", probe.error or "")
        return True

    def ensure_package_set_installed(self, names: list[str], *, cask: bool = False) -> None:
        """Install a package set with one batched invocation.

        Raises:
            PackageInstallError: Naming the failed invocation. There is no
                per-package detail; the batch either succeeds or it does not.
        """
        if not names:
            logger.debug("Empty package set — nothing to install")
            return

        kind = "cask packages" if cask else "brew packages"
        logger.info("Installing %s: %s", kind, " ".join(names))

        receipt = self._host.homebrew.install(names, cask=cask)
        if receipt.failed:
            raise PackageInstallError(receipt.display, receipt.error or "")

    # ── Privacy ─────────────────────────────────────────────────

    def ensure_full_disk_access(self, app_name: str) -> bool:
        """Make sure the terminal running us has Full Disk Access.

        Returns:
            True if access had to be requested.
        """
        fda = self._host.full_disk_access
        logger.info("Checking and requesting Full Disk Access...")

        if fda.probe():
            logger.info("Full Disk Access is already granted")
            return False

        fda.request(app_name)

        if not fda.probe():
            raise ConfigurationError(
                "Full Disk Access was not granted. Run again and approve the permission request."
            )
        logger.info("Full Disk Access granted successfully")
        return True

    # ── Power & screen ──────────────────────────────────────────

    def ensure_power_settings(self) -> list[str]:
        """Keep the display awake and the screen unlocked.

        Returns:
            Names of the settings that were changed.
        """
        logger.info("Configuring power management and screen settings...")
        defaults = self._host.defaults
        changed: list[str] = []

        wanted = [
            # (label, key, value, type, current_host)
            ("screensaver idle", "idleTime", "0", "int", True),
            ("screen lock", "askForPassword", "0", "int", False),
            ("screen lock delay", "askForPasswordDelay", "0", "int", False),
        ]
        for label, key, value, value_type, current_host in wanted:
            current = defaults.read(SCREENSAVER_DOMAIN, key, current_host=current_host)
            if current.ok and current.output.strip() == value:
                continue
            receipt = defaults.write(
                SCREENSAVER_DOMAIN, key, value, value_type=value_type, current_host=current_host
            )
            if receipt.failed:
                raise ConfigurationError(f"Failed to set {label}: {receipt.error}")
            changed.append(label)

        power = self._host.power
        if power.current("displaysleep") != "0":
            receipt = power.set("displaysleep", "0")
            if receipt.failed:
                raise ConfigurationError(f"Failed to disable display sleep: {receipt.error}")
            changed.append("display sleep")

        logger.info("Power management and screen settings configured")
        return changed

    # ── Automatic login ─────────────────────────────────────────

    def ensure_autologin(self, user: str) -> list[str]:
        """Log ``user`` in automatically at boot.

        FileVault blocks automatic login, so it is disabled when active.

        Returns:
            Names of the settings that were changed.
        """
        logger.info("Configuring automatic login for user: %s", user)
        defaults = self._host.defaults
        changed: list[str] = []

        current = defaults.read(LOGINWINDOW_PLIST, "autoLoginUser", sudo=True)
        if not (current.ok and current.output.strip() == user):
            receipt = defaults.write(LOGINWINDOW_PLIST, "autoLoginUser", user, sudo=True)
            if receipt.failed:
                raise ConfigurationError(f"Failed to set automatic login user: {receipt.error}")
            changed.append("autoLoginUser")

        filevault = self._host.filevault
        if filevault.is_active():
            logger.info("FileVault is enabled. Disabling for automatic login...")
            receipt = filevault.disable()
            if receipt.failed:
                raise ConfigurationError(f"Failed to disable FileVault: {receipt.error}")
            changed.append("FileVault")

        current = defaults.read(LOGINWINDOW_PLIST, "SHOWFULLNAME", sudo=True)
        if not (current.ok and current.output.strip() == "0"):
            receipt = defaults.write(
                LOGINWINDOW_PLIST, "SHOWFULLNAME", "false", value_type="bool", sudo=True
            )
            if receipt.failed:
                raise ConfigurationError(f"Failed to configure login window: {receipt.error}")
            changed.append("SHOWFULLNAME")

        logger.info("Automatic login configured successfully")
        return changed
