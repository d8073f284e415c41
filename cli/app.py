from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from client.config import ClientConfig, load_config
from client.consentium import ConsentiumClient
from logging_config import configure_logging
from models.records import SensorReading
from cli.render import render_readings, render_send_result


@dataclass
class CLIState:
    config: ClientConfig
    client: ConsentiumClient


app = typer.Typer(
    help="Submit and retrieve sensor readings on the Consentium IoT cloud.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _parse_sensor(raw: str) -> SensorReading:
    label, separator, value = raw.partition("=")
    label = label.strip()
    if not separator or not label:
        raise typer.BadParameter(f"Expected LABEL=VALUE, got {raw!r}.", param_hint="--sensor")
    try:
        number = float(value.strip())
    except ValueError as exc:
        raise typer.BadParameter(
            f"Value for {label!r} is not a number: {value!r}.", param_hint="--sensor"
        ) from exc
    if not math.isfinite(number):
        raise typer.BadParameter(
            f"Value for {label!r} must be a finite number, got {value!r}.", param_hint="--sensor"
        )
    return SensorReading(info=label, value=number)


@app.callback()
def main(
    ctx: typer.Context,
    proxy: Optional[str] = typer.Option(
        None,
        "--proxy",
        "-p",
        help="Relay base URL; calls go through it instead of the remote API.",
    ),
    send_url: Optional[str] = typer.Option(None, "--send-url", help="Override the update endpoint."),
    receive_url: Optional[str] = typer.Option(None, "--receive-url", help="Override the retrieval endpoint."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds."),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS certificate verification."),
    ca_bundle: Optional[Path] = typer.Option(
        None,
        "--ca-bundle",
        envvar="CONSENTIUM_CA_BUNDLE",
        exists=True,
        dir_okay=False,
        readable=True,
        help="PEM file with trusted CA certificates.",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging()
    config = load_config(
        send_url=send_url,
        receive_url=receive_url,
        proxy_base=proxy,
        verify_ssl=False if insecure else None,
        ca_bundle=str(ca_bundle) if ca_bundle else None,
        timeout=timeout,
    )
    try:
        client = ConsentiumClient(config)
    except OSError as exc:
        raise typer.BadParameter(
            f"Could not load CA certificates from {config.ca_bundle}: {exc}",
            param_hint="--ca-bundle",
        ) from exc
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    send_key: str = typer.Option(..., "--send-key", envvar="CONSENTIUM_SEND_KEY", help="Send key of the board."),
    board_key: str = typer.Option(..., "--board-key", envvar="CONSENTIUM_BOARD_KEY", help="Board key."),
    sensors: List[str] = typer.Option(
        ...,
        "--sensor",
        "-s",
        help="Reading as LABEL=VALUE; repeat for up to eight sensors.",
    ),
    firmware: Optional[str] = typer.Option(None, "--firmware", help="Firmware version."),
    architecture: Optional[str] = typer.Option(None, "--architecture", help="Board architecture."),
    mac: Optional[str] = typer.Option(None, "--mac", help="Device MAC address in any notation."),
    ota: bool = typer.Option(False, "--ota/--no-ota", help="Report OTA updates as enabled."),
    signal: Optional[float] = typer.Option(None, "--signal", help="Signal strength (RSSI)."),
    precision: Optional[int] = typer.Option(None, "--precision", min=0, help="Decimal places for values."),
) -> None:
    """Submit one batch of readings."""
    state = _get_state(ctx)
    readings = [_parse_sensor(raw) for raw in sensors]
    board_info: Dict[str, Any] = {
        "firmwareVersion": firmware,
        "architecture": architecture,
        "deviceMAC": mac,
        "statusOTA": ota,
        "signalStrength": signal,
    }
    board_info = {key: value for key, value in board_info.items() if value is not None}

    target = state.config.proxy_base or state.config.send_url
    typer.echo(f"Sending {len(readings)} reading(s) to {target} ...")
    result = state.client.send_data(
        send_key,
        board_key,
        readings,
        board_info=board_info,
        precision=precision,
    )
    render_send_result(result)


@app.command("receive")
def receive_command(
    ctx: typer.Context,
    receive_key: str = typer.Option(
        ..., "--receive-key", envvar="CONSENTIUM_RECEIVE_KEY", help="Receive key of the board."
    ),
    board_key: str = typer.Option(..., "--board-key", envvar="CONSENTIUM_BOARD_KEY", help="Board key."),
    recents: bool = typer.Option(True, "--recents/--all", help="Fetch only the most recent feeds."),
    raw: bool = typer.Option(False, "--raw", help="Print the raw response document as JSON."),
) -> None:
    """Fetch feeds and print them as labeled readings."""
    state = _get_state(ctx)
    result = state.client.receive_data(receive_key, board_key, recents=recents)
    render_readings(result, raw=raw)
