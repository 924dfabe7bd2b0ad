"""Doctor command for configuration diagnostics."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.errors import TrackerError
from core.services.tracker_client import TrackerClient

app = typer.Typer(no_args_is_help=True, help="Configuration checks and setup.")

_console = Console()


def _check_logon(settings: AppSettings) -> tuple[bool, str]:
    try:
        with TrackerClient(settings) as client:
            client.logon(force_refresh=True)
        return True, "Token issued"
    except TrackerError as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Show the active configuration and try a logon."""

    settings = AppSettings()

    table = Table(title="fogbugz-cli Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Domain", "OK" if settings.domain else "MISSING", settings.domain or "FOGBUGZ_DOMAIN")
    table.add_row("Email", "OK" if settings.email else "MISSING", settings.email or "FOGBUGZ_EMAIL")
    table.add_row(
        "Password",
        "OK" if settings.password else "PROMPT",
        "set" if settings.password else "Will be prompted on each command",
    )
    table.add_row("Token", "OK" if settings.token else "OPTIONAL", "FOGBUGZ_TOKEN")
    table.add_row("User config", "OK" if get_user_env_file().exists() else "NONE", str(get_user_env_file()))

    if settings.credentials().is_complete():
        ok, detail = _check_logon(settings)
        table.add_row("Logon", "OK" if ok else "FAIL", detail)
    else:
        table.add_row("Logon", "SKIPPED", "Incomplete credentials")

    _console.print(table)


@app.command()
def setup() -> None:
    """Store domain and email in the user config .env (the password is never stored)."""

    current = AppSettings()
    domain = typer.prompt("Domain", default=current.domain or "", show_default=bool(current.domain)).strip()
    email = typer.prompt("Email", default=current.email or "", show_default=bool(current.email)).strip()

    if not domain or not email:
        raise typer.BadParameter("domain and email are required")

    env_path = write_user_env_vars({"FOGBUGZ_DOMAIN": domain, "FOGBUGZ_EMAIL": email})
    _console.print(f"[green]Saved config to:[/green] {env_path}")
