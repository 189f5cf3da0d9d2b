from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

TELEMETRY_COLUMNS = ("MS", "UA", "TP", "S1", "S2", "RL", "RG")


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_user(user: Dict[str, Any]) -> None:
    echo_heading("Owner")
    echo_key_values(
        [
            ("id", user.get("id")),
            ("name", user.get("name")),
            ("email", user.get("email")),
            ("createdAt", user.get("createdAt")),
        ]
    )


def render_devices(payload: Dict[str, Any]) -> None:
    user = payload.get("user")
    if user:
        render_user(user)
        typer.echo()

    echo_heading("Devices")
    for entry in payload.get("userData") or []:
        typer.echo(f"- {entry.get('device')}")
        telemetry = entry.get("telemetry")
        if not telemetry:
            typer.echo("    no telemetry yet")
            continue
        readings = " ".join(f"{key}={telemetry.get(key)}" for key in TELEMETRY_COLUMNS)
        typer.echo(f"    {readings}")
        typer.echo(f"    updated {telemetry.get('DAY')} {telemetry.get('HR')}")


def render_alerts(payload: Dict[str, Any]) -> None:
    echo_heading("Alerts")
    for entry in payload.get("userData") or []:
        alerts = entry.get("alerts") or []
        typer.echo(f"- {entry.get('device')} ({len(alerts)})")
        for alert in alerts:
            typer.echo(f"    {alert.get('day')} {alert.get('time')}  {alert.get('message')}")
