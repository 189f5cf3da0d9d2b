from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_alerts, render_devices, render_user


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the irrigation telemetry service.",
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
        help="API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("register")
def register_command(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", "-e"),
    name: str = typer.Option(..., "--name", "-n", help="Owner display name."),
    device: str = typer.Option(..., "--device", "-d", help="Identifier of the first device."),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
) -> None:
    """Create an owner account with its first device."""
    state = _get_state(ctx)
    payload = state.client.register(email, password, name, device)
    typer.secho(payload.get("message", "Registered."), fg=typer.colors.GREEN)
    render_user(payload.get("user") or {})


@app.command("login")
def login_command(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", "-e"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
) -> None:
    """Show the latest telemetry of every device."""
    state = _get_state(ctx)
    render_devices(state.client.login(email, password))


@app.command("alerts")
def alerts_command(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", "-e"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
) -> None:
    """Show the irrigation alert log of every device."""
    state = _get_state(ctx)
    render_alerts(state.client.alerts(email, password))


@app.command("reset-password")
def reset_password_command(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", "-e"),
) -> None:
    """Request a password reset e-mail."""
    state = _get_state(ctx)
    payload = state.client.reset_password(email)
    typer.echo(payload.get("message", "Requested."))


@app.command("send")
def send_command(
    ctx: typer.Context,
    user_id: str = typer.Option(..., "--user", "-u", help="E-mail of the owning account."),
    device: str = typer.Option(..., "--device", "-d"),
    ms: float = typer.Option(0, "--ms", help="Soil moisture."),
    ua: float = typer.Option(0, "--ua", help="Air humidity."),
    tp: float = typer.Option(0, "--tp", help="Temperature."),
    s1: float = typer.Option(0, "--s1"),
    s2: float = typer.Option(0, "--s2"),
    relay: bool = typer.Option(False, "--relay/--no-relay", help="Relay state (RL)."),
    irrigated: bool = typer.Option(False, "--irrigated/--not-irrigated", help="Irrigation performed (RG)."),
) -> None:
    """Send one telemetry report as a device would."""
    state = _get_state(ctx)
    readings = {"MS": ms, "UA": ua, "TP": tp, "S1": s1, "S2": s2, "RL": relay, "RG": irrigated}
    state.client.send_telemetry(user_id, device, readings)
    typer.secho(f"Report accepted for device {device}.", fg=typer.colors.GREEN)
