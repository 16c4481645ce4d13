from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_upload(payload: Dict[str, Any]) -> None:
    echo_heading("Reading Recorded")
    echo_key_values(
        [
            ("measure_uuid", payload.get("measure_uuid")),
            ("measure_value", payload.get("measure_value")),
            ("image_url", payload.get("image_url")),
        ]
    )


def render_measures(payload: Dict[str, Any]) -> None:
    echo_heading(f"Readings for {payload.get('customer_code')}")
    measures = payload.get("measures") or []
    if not measures:
        typer.echo("No readings recorded.")
        return
    for measure in measures:
        state = "confirmed" if measure.get("has_confirmed") else "unconfirmed"
        typer.echo(
            f"  - {measure.get('measure_uuid')} | {measure.get('measure_type')} | "
            f"{measure.get('measure_datetime')} | {state}"
        )
