"""Typer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

from ibsparse.core.errors import IbsparseError
from ibsparse.core.model import ProductDefinition, ProductFamily
from ibsparse.core.payload import Payload
from ibsparse.core.service import BeaconService

app = typer.Typer(help="Decode INGICS iBS beacon advertisements and gateway reports")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _build_service() -> BeaconService:
    service = BeaconService()
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _describe(payload: Payload) -> str:
    if payload.error:
        return f"<truncated: {payload.error}>"
    text = str(payload)
    return text or "<no data>"


def _vendors(family: ProductFamily) -> str:
    if family.any_vendor:
        return "any vendor"
    return ", ".join(f"0x{vendor:04X}" for vendor in family.vendors)


@app.command("payload")
def decode_payload(
    hex_values: list[str] = typer.Argument(..., metavar="HEX...", help="Raw advertisement bytes as hex"),
) -> None:
    """Decode raw advertisements (AD structures, e.g. 02010612FF...)."""
    try:
        service = _build_service()
        for value in hex_values:
            typer.echo(_describe(service.parse_advertisement(value)))
    except IbsparseError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("msd")
def decode_msd(
    hex_values: list[str] = typer.Argument(..., metavar="HEX...", help="Manufacturer data as hex, vendor code first"),
) -> None:
    """Decode bare manufacturer-specific data."""
    try:
        service = _build_service()
        for value in hex_values:
            typer.echo(_describe(service.parse_msd(value)))
    except IbsparseError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("message")
def decode_message(line: str = typer.Argument(..., help="Gateway report line, e.g. $GPRP,...")) -> None:
    """Decode one gateway report line."""
    try:
        service = _build_service()
        report = service.parse_message(line)
        message = report.message
        typer.echo(f"{message.msg_type} {message.beacon} via {message.gateway} rssi={message.rssi}")
        if message.timestamp is not None:
            typer.echo(f"  time: {message.timestamp.isoformat()}")
        typer.echo(f"  {_describe(report.payload)}")
    except IbsparseError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("products")
def list_products() -> None:
    """List known product families and their subtypes."""
    try:
        service = _build_service()
        families = service.list_families()
        if not families:
            typer.echo("No product families loaded")
            raise typer.Exit(code=1)

        for family in families:
            typer.echo(f"{family.id}: 0x{family.product:04X} {family.name} ({_vendors(family)})")
            layout = family.layout
            if isinstance(layout, ProductDefinition):
                typer.echo(f"  {', '.join(f.value for f in layout.fields)}")
                continue
            for subtype, definition in sorted(layout.rows.items()):
                model = definition.model.resolve(0)
                typer.echo(f"  0x{subtype:02X} {model}: {', '.join(f.value for f in definition.fields)}")
    except IbsparseError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("scan")
def scan(
    timeout: float = typer.Option(5.0, "--timeout", help="Seconds to listen"),
    show_all: bool = typer.Option(False, "--all", help="Also show advertisements that are not iBS beacons"),
) -> None:
    """Scan for nearby beacons over BLE and decode what is heard."""
    try:
        service = _build_service()
        results = service.scan(timeout_s=timeout, resolved_only=not show_all)
        if not results:
            typer.echo("No beacons found")
            return

        for result in results:
            record = result.record
            rssi = record.rssi if record.rssi is not None else "?"
            typer.echo(f"{record.mac} rssi={rssi} {_describe(result.payload)}")
    except IbsparseError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
