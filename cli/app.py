from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_measures, render_upload


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the meter reading service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for a response; uploads wait on image recognition.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("upload")
def upload_command(
    ctx: typer.Context,
    image: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Meter photograph."),
    customer_code: str = typer.Option(..., "--customer", "-c", help="Customer code."),
    measure_type: str = typer.Option("WATER", "--type", "-t", help="WATER or GAS."),
    measure_datetime: str = typer.Option(
        ..., "--datetime", "-d", help="ISO-8601 timestamp of the reading."
    ),
) -> None:
    """Upload a meter photograph and record the recognised reading."""
    state = _get_state(ctx)
    typer.echo(f"Uploading {image} to {state.config.base_url} ...")
    payload = state.client.upload(image, customer_code, measure_datetime, measure_type)
    render_upload(payload)


@app.command("confirm")
def confirm_command(
    ctx: typer.Context,
    measure_uuid: str = typer.Argument(..., help="Identifier returned by the upload command."),
    value: int = typer.Argument(..., help="Value read by a human."),
) -> None:
    """Confirm or correct the value of a reading."""
    state = _get_state(ctx)
    state.client.confirm(measure_uuid, value)
    typer.secho(f"Reading {measure_uuid} confirmed with value {value}.", fg=typer.colors.GREEN)


@app.command("list")
def list_command(
    ctx: typer.Context,
    customer_code: str = typer.Argument(..., help="Customer code."),
    measure_type: str = typer.Option("WATER", "--type", "-t", help="WATER or GAS."),
) -> None:
    """List a customer's readings of one meter type."""
    state = _get_state(ctx)
    payload = state.client.list_measures(customer_code, measure_type)
    render_measures(payload)
