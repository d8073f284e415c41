from __future__ import annotations

import json
from typing import Any, Iterable

import typer

from models.records import ReceiveResult, SensorReading, TransportResult


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_body(body: Any) -> None:
    if body is None or body == "":
        return
    if isinstance(body, str):
        typer.echo(body)
        return
    typer.echo(json.dumps(body, indent=2, sort_keys=True))


def echo_readings(readings: Iterable[SensorReading]) -> None:
    for reading in readings:
        typer.echo(f"  - {reading.info}: {reading.value}")


def fail(result: TransportResult) -> None:
    if result.status == 0:
        message = f"Request failed: {result.error or 'unknown transport error.'}"
    else:
        message = f"Request failed with status {result.status}."
    typer.secho(message, fg=typer.colors.RED, err=True)
    echo_body(result.body)
    raise typer.Exit(code=1)


def render_send_result(result: TransportResult) -> None:
    if not result.ok:
        fail(result)
    typer.secho(f"Submission accepted. status={result.status}", fg=typer.colors.GREEN)
    echo_body(result.body)


def render_readings(result: ReceiveResult, raw: bool = False) -> None:
    if not result.ok:
        fail(result)
    if raw:
        echo_body(result.body)
        return

    echo_heading("Readings")
    if result.feeds is None:
        typer.echo("Response was not a JSON document:")
        echo_body(result.body)
    elif result.feeds:
        echo_readings(result.feeds)
    else:
        typer.echo("No readings returned.")
