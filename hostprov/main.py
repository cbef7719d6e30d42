"""
hostprov — CLI entrypoint.

Usage:
    hostprov                      # configure host, register service
    hostprov user@host:/models/   # ...then stage models and wait for the service
    hostprov -- user@host:/models/
    python -m hostprov --help
"""

from __future__ import annotations

import getpass
import json
import os
import sys
from datetime import datetime
from pathlib import Path

import click

from hostprov import __version__
from hostprov.adapters.registry import Host
from hostprov.core.errors import ProvisionError
from hostprov.core.observability.logging_config import setup_logging

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _report_error(error: ProvisionError) -> None:
    """The single terminal diagnostic line for a failed run."""
    click.echo(f"[{_timestamp()}] ERROR: {error.step}: {error}", err=True)


def _build_host(descriptor_dir: Path, rsync_io_timeout: int) -> Host:
    from hostprov.adapters.shell.command import ShellRunner
    from hostprov.adapters.shell.process import SubprocessLauncher

    return Host.create(
        ShellRunner(),
        SubprocessLauncher(),
        descriptor_dir=descriptor_dir,
        rsync_io_timeout=rsync_io_timeout,
    )


def _current_euid() -> int:
    return os.geteuid()


@click.command()
@click.version_option(version=__version__, prog_name="hostprov")
@click.argument("remote_location", required=False)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only report errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="HOSTPROV_CONFIG",
    help="Path to hostprov.yml (default: ./hostprov.yml if present).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the run result as JSON.")
def cli(
    remote_location: str | None,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    as_json: bool,
) -> None:
    """Provision this machine as a service host.

    REMOTE_LOCATION is an optional rsync source (local path or
    host:path). When given, its contents are staged for the service,
    which is started and watched until it has consumed them.
    """
    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("HOSTPROV_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("HOSTPROV_LOG_FILE"),
        log_file_level=os.environ.get("HOSTPROV_LOG_FILE_LEVEL"),
    )

    from hostprov.core.config.loader import build_run_config, load_settings
    from hostprov.core.services.staging import termination_as_interrupt
    from hostprov.core.use_cases.provision import provision

    try:
        settings = load_settings(Path(config_path) if config_path else None)
    except ProvisionError as e:
        _report_error(e)
        sys.exit(EXIT_FAILURE)

    config = build_run_config(
        settings,
        home=Path.home(),
        user=getpass.getuser(),
        remote_source=remote_location,
    )
    host = _build_host(
        Path(settings.service.descriptor_dir),
        settings.transfer.io_timeout,
    )

    try:
        with termination_as_interrupt():
            result = provision(config, host, euid=_current_euid())
    except KeyboardInterrupt:
        click.echo(f"[{_timestamp()}] ERROR: interrupted", err=True)
        sys.exit(EXIT_INTERRUPTED)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))

    if result.error is not None:
        _report_error(result.error)
        sys.exit(EXIT_FAILURE)

    if as_json or quiet:
        return

    click.secho("Installation complete!", fg="green", bold=True)
    click.echo("To manage the service:")
    stdout_log = config.log_dir / settings.service.stdout_log
    for title, command in host.launchd.management_commands(settings.service.label, stdout_log):
        click.echo(f"  {title + ':':<8}{command}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
