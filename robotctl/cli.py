"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
import signal

import typer

from robotctl.core import commands
from robotctl.core.errors import RobotctlError
from robotctl.core.model import RobotProfile
from robotctl.core.profile_loader import DEFAULT_PROFILE_ID, load_profiles
from robotctl.core.service import RobotService
from robotctl.terminal import read_keys
from robotctl.transports.bluetoothctl import BluetoothctlSession

app = typer.Typer(help="Drive a BLE robot with the arrow keys via bluetoothctl")


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


def _load_profile(profile_id: str) -> RobotProfile:
    loaded = load_profiles()
    for warning in loaded.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    profile = loaded.profiles.get(profile_id)
    if profile is None:
        available = ", ".join(sorted(loaded.profiles))
        raise RobotctlError(f"Unknown profile '{profile_id}'. Available: {available}")
    return profile


def _open_session(profile: RobotProfile) -> BluetoothctlSession:
    return BluetoothctlSession.open(
        profile.agent.command,
        read_timeout_s=profile.agent.read_timeout_s,
    )


def _raise_interrupt(signum: int, frame: object) -> None:
    raise KeyboardInterrupt


@app.command("drive")
def drive(
    profile: str = typer.Option(DEFAULT_PROFILE_ID, "--profile", help="Robot profile ID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log agent traffic"),
) -> None:
    """Find the robot, connect, and drive it with the arrow keys."""
    _configure_logging(verbose)
    # SIGTERM unwinds through the same teardown path as CTRL-C.
    signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        robot = _load_profile(profile)
        with _open_session(robot) as session:
            service = RobotService(session, robot, echo=typer.echo)
            service.run(read_keys())
    except KeyboardInterrupt:
        typer.echo("")
        raise typer.Exit(code=130) from None
    except RobotctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("scan")
def scan(
    profile: str = typer.Option(DEFAULT_PROFILE_ID, "--profile", help="Robot profile ID"),
    timeout: float | None = typer.Option(None, "--timeout", help="Give up after this many seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log agent traffic"),
) -> None:
    """Scan for a robot and print its address without connecting."""
    _configure_logging(verbose)
    try:
        robot = _load_profile(profile)
        with _open_session(robot) as session:
            service = RobotService(session, robot, echo=typer.echo)
            try:
                address = service.discover(timeout_s=timeout)
            finally:
                service.teardown()
        typer.echo(f"{robot.name}: {address}")
    except KeyboardInterrupt:
        raise typer.Exit(code=130) from None
    except RobotctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("profiles")
def list_profiles() -> None:
    """List available robot profiles."""
    try:
        loaded = load_profiles()
        for warning in loaded.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        if not loaded.profiles:
            typer.echo("No profiles loaded")
            raise typer.Exit(code=1)

        for robot in sorted(loaded.profiles.values(), key=lambda p: p.id):
            typer.echo(f"{robot.id}: {robot.name}")
            typer.echo(f"  service: {robot.service_uuid}")
            typer.echo(f"  tx: {robot.tx_char_uuid}")
    except RobotctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("commands")
def list_commands() -> None:
    """Print the motor command frames as written to the robot."""
    for direction, command in commands.CATALOG.items():
        typer.echo(f"{direction.value}: {commands.format_frame(command.frame)}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
