"""Typer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

from pinctl.core.codec import parse_pin_assignment
from pinctl.core.errors import PinctlError
from pinctl.core.model import ScanResult, SessionOutcome
from pinctl.core.service import FRAMES, PinctlService

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

app = typer.Typer(help="Drive ESP32 GPIO pins over Bluetooth Low Energy")


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging for BLE steps."),
) -> None:
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT, force=True)
    logging.getLogger("pinctl").setLevel(logging.DEBUG if debug else logging.WARNING)


def _build_service() -> PinctlService:
    service = PinctlService()
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _observer(verbose: bool):
    if not verbose:
        return None

    def _echo(result: ScanResult) -> None:
        if result.name:
            typer.echo(f"Seen: {result.name} ({result.address}, {result.rssi} dBm)", err=True)

    return _echo


def _echo_target(outcome: SessionOutcome) -> None:
    if outcome.device is not None:
        typer.echo(
            f"Device: {outcome.device.name} ({outcome.device.address}, {outcome.device.rssi} dBm)"
        )
    typer.echo(f"Characteristic: {outcome.characteristic_uuid} in service {outcome.service_uuid}")
    if outcome.disconnect_error:
        typer.echo(f"Warning: {outcome.disconnect_error}", err=True)


@app.command("profiles")
def list_profiles() -> None:
    """List available device profiles and their characteristics."""
    try:
        service = _build_service()
        profiles = service.list_profiles()
        if not profiles:
            typer.echo("No profiles loaded")
            raise typer.Exit(code=1)

        for profile in profiles:
            typer.echo(f"{profile.id}: {profile.name}")
            if profile.device_name:
                typer.echo(f"  device_name: {profile.device_name}")
            typer.echo(f"  write: {profile.characteristics.write}")
            typer.echo(f"  telemetry: {profile.characteristics.telemetry}")
            typer.echo(f"  pin_state: {profile.characteristics.pin_state}")
    except PinctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("scan")
def scan(
    timeout: float = typer.Option(5.0, "--timeout", min=0.1, help="Scan duration in seconds"),
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """List advertising BLE devices."""
    try:
        service = _build_service()
        devices = service.scan_devices(timeout, profile_id=profile)
        if not devices:
            typer.echo("No BLE devices found")
            return

        for device in devices:
            name = device.name or "<unnamed>"
            typer.echo(f"{device.address} {name} ({device.rssi} dBm)")
    except PinctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("write")
def write_pins(
    name: str | None = typer.Argument(None, help="Advertised device name"),
    pins: list[str] = typer.Option(..., "--pin", "-p", help="PIN=STATE, repeatable"),
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
    timeout: float | None = typer.Option(None, "--timeout", min=0.1, help="Scan timeout in seconds"),
    char: str | None = typer.Option(None, "--char", help="Override write characteristic UUID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every device seen while scanning"),
) -> None:
    """Send a pin-write command to the named device."""
    try:
        entries = [parse_pin_assignment(pin) for pin in pins]
        service = _build_service()
        outcome = service.write_pins(
            entries,
            name,
            profile_id=profile,
            timeout_s=timeout,
            characteristic_uuid=char,
            observer=_observer(verbose),
        )
        _echo_target(outcome)
        summary = ", ".join(f"{e.pin_num}={e.state}" for e in entries)
        typer.echo(f"Wrote {outcome.bytes_written} byte(s): {summary}")
    except PinctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("read")
def read_pins(
    name: str | None = typer.Argument(None, help="Advertised device name"),
    frame: str = typer.Option("telemetry", "--frame", help=f"Frame type: {', '.join(FRAMES)}"),
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
    timeout: float | None = typer.Option(None, "--timeout", min=0.1, help="Scan timeout in seconds"),
    char: str | None = typer.Option(None, "--char", help="Override read characteristic UUID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every device seen while scanning"),
) -> None:
    """Read and decode a pin frame from the named device."""
    try:
        if frame not in FRAMES:
            typer.echo(f"Error: Unknown frame '{frame}'. Expected one of: {', '.join(FRAMES)}", err=True)
            raise typer.Exit(code=2)
        service = _build_service()
        outcome = service.read_pins(
            name,
            frame=frame,
            profile_id=profile,
            timeout_s=timeout,
            characteristic_uuid=char,
            observer=_observer(verbose),
        )
        _echo_target(outcome)
        if not outcome.readings:
            typer.echo("No pins reported")
        for reading in outcome.readings:
            typer.echo(f"  pin {reading.pin}: {reading.value}")
    except PinctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
