"""
Tests for the service registrar — descriptor derivation and install.
"""

import plistlib
from pathlib import Path

import pytest

from hostprov.adapters.macos.launchd import LaunchdAdapter
from hostprov.adapters.mock import MockRunner
from hostprov.core.errors import ServiceRegistrationError
from hostprov.core.services.registrar import ServiceRegistrar, build_service_descriptor


class TestBuildDescriptor:
    def test_derived_from_config(self, run_config, home: Path):
        descriptor = build_service_descriptor(run_config)
        assert descriptor.label == "io.focused.exo"
        assert descriptor.program_arguments == ["/opt/homebrew/bin/uv", "run", "exo", "--disable-tui"]
        assert descriptor.working_directory == home / "workspace" / "exo"
        assert descriptor.stdout_path == home / ".local/var/log/exo/exo.log"
        assert descriptor.stderr_path == home / ".local/var/log/exo/error.log"
        assert descriptor.user_name == "tester"
        assert descriptor.keep_alive is True

    def test_launchd_rendering(self, run_config):
        descriptor = build_service_descriptor(run_config)
        plist = plistlib.loads(LaunchdAdapter.render(descriptor).encode())
        assert plist["Label"] == "io.focused.exo"
        assert plist["KeepAlive"] is True
        assert plist["RunAtLoad"] is True
        assert plist["UserName"] == "tester"
        assert plist["ProgramArguments"][-1] == "--disable-tui"
        assert plist["StandardErrorPath"].endswith("error.log")


class TestRegisterService:
    def test_writes_descriptor_and_log_dirs(self, host, runner: MockRunner, run_config, tmp_path: Path):
        descriptor = build_service_descriptor(run_config)
        path = ServiceRegistrar(host).register_service(descriptor)

        assert path == str(tmp_path / "LaunchDaemons" / "io.focused.exo.plist")
        assert descriptor.stdout_path.parent.is_dir()

        tee = runner.calls_to("tee")[0]
        assert tee.sudo
        assert tee.command == ["tee", path]
        assert plistlib.loads(tee.input.encode())["WorkingDirectory"] == str(run_config.checkout_dir)

    def test_reregistration_overwrites(self, host, runner: MockRunner, run_config):
        registrar = ServiceRegistrar(host)
        descriptor = build_service_descriptor(run_config)
        first = registrar.register_service(descriptor)
        second = registrar.register_service(descriptor)
        assert first == second
        assert len(runner.calls_to("tee")) == 2
        assert runner.calls_to("launchctl") == []  # never starts the service

    def test_install_failure(self, host, runner: MockRunner, run_config):
        runner.set_failure(["tee"], "Permission denied")
        with pytest.raises(ServiceRegistrationError, match="Permission denied"):
            ServiceRegistrar(host).register_service(build_service_descriptor(run_config))

    def test_log_directory_failure(self, host, run_config, home: Path):
        blocker = home / ".local"
        blocker.write_text("file in the way")
        with pytest.raises(ServiceRegistrationError, match="log directory"):
            ServiceRegistrar(host).register_service(build_service_descriptor(run_config))
