"""CLI principal (Typer + Rich).

Capa de presentación:
- Pide credenciales si faltan, llama a las operaciones de `TrackerClient` y
  pinta las vistas tipadas.
- No contiene lógica de protocolo: todo pasa por el Core.
"""

from __future__ import annotations

import logging
import webbrowser
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.json_exporter import export_view_json
from cli import doctor
from cli.ui_components import (
    build_case_panel,
    build_cases_table,
    build_filters_table,
    print_banner,
)
from core.config import AppSettings
from core.errors import TrackerError
from core.services.tracker_client import TrackerClient

app = typer.Typer(no_args_is_help=True, help="Interactive client for a FogBugz-style tracker API.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )
    # httpx/httpcore loguean cada request en INFO/DEBUG; el transporte ya lo hace.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def load_settings(*, interactive: bool = True, force_refresh: bool = False) -> AppSettings:
    """Carga la config y completa email/password por prompt si faltan.

    Con un token configurado no se pregunta nada, salvo que se fuerce un
    logon nuevo (`force_refresh`): ahí hacen falta las credenciales.
    """

    settings = AppSettings()
    if not interactive or (settings.token and not force_refresh):
        return settings

    updates: dict[str, str] = {}
    if not settings.domain:
        updates["domain"] = typer.prompt("Domain").strip()
    if not settings.email:
        updates["email"] = typer.prompt("Email").strip()
    if not settings.password:
        updates["password"] = typer.prompt("Password", hide_input=True)
    if not updates:
        return settings
    return AppSettings(**{**settings.model_dump(), **updates})


def build_tracker_client(settings: AppSettings) -> TrackerClient:
    return TrackerClient(settings)


@contextmanager
def _tracker(interactive: bool = True, force_refresh: bool = False) -> Iterator[TrackerClient]:
    try:
        settings = load_settings(interactive=interactive, force_refresh=force_refresh)
        with build_tracker_client(settings) as client:
            yield client
    except TrackerError as exc:
        _err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def _split_columns(columns: str) -> list[str]:
    return [name.strip() for name in columns.split(",") if name.strip()]


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests (DEBUG)."),
) -> None:
    configure_logging(verbose)


@app.command()
def logon(
    force: bool = typer.Option(False, "--force", help="Discard the cached token and log on again."),
) -> None:
    """Log on and print the session token (export it as FOGBUGZ_TOKEN)."""

    with _tracker(force_refresh=force) as client:
        token = client.logon(force_refresh=force)
    _console.print(token)


@app.command()
def filters(
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Also write the list as JSON."),
) -> None:
    """List saved filters; the current one is marked with '*'."""

    with _tracker() as client:
        print_banner(_console, client.settings.domain)
        items = client.list_filters()
    _console.print(build_filters_table(items))
    if json_out:
        export_view_json(view=items, output_path=json_out)


@app.command(name="use-filter")
def use_filter(filter_id: str = typer.Argument(..., help="Filter id (sFilter).")) -> None:
    """Make a saved filter the current one."""

    with _tracker() as client:
        client.set_current_filter(filter_id)
    _console.print(f"[green]Current filter:[/green] {filter_id}")


@app.command()
def search(
    query: str = typer.Argument("", help="Search query; empty uses the current filter."),
    cols: Optional[str] = typer.Option(None, "--cols", help="Comma separated columns."),
    max_results: Optional[str] = typer.Option(None, "--max", help="Maximum number of cases."),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Also write the result as JSON."),
) -> None:
    """Search cases."""

    with _tracker() as client:
        columns = cols or client.settings.default_columns
        result = client.search_cases(query, columns, max_results)
    _console.print(build_cases_table(result, _split_columns(columns)))
    if json_out:
        export_view_json(view=result, output_path=json_out)


@app.command()
def show(
    case_id: str = typer.Argument(..., help="Case number (ixBug)."),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Also write the case as JSON."),
) -> None:
    """Show title, priority and the event timeline of a case."""

    with _tracker() as client:
        case = client.show_case_details(case_id)
    _console.print(build_case_panel(case))
    if json_out:
        export_view_json(view=case, output_path=json_out)


@app.command()
def start(case_id: str = typer.Argument(..., help="Case number (ixBug).")) -> None:
    """Start the work timer on a case."""

    with _tracker() as client:
        client.start_work(case_id)
    _console.print(f"[green]Working on case {case_id}[/green]")


@app.command()
def stop() -> None:
    """Stop the work timer."""

    with _tracker() as client:
        client.stop_work()
    _console.print("[green]Stopped working[/green]")


@app.command(name="open")
def open_case(case_id: str = typer.Argument(..., help="Case number (ixBug).")) -> None:
    """Open a case in the web browser."""

    with _tracker(interactive=False) as client:
        url = client.case_url(case_id)
    _console.print(url)
    webbrowser.open(url)


def run() -> None:
    app()
