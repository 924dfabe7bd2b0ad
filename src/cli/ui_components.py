"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Consumen solo vistas tipadas (`Filter`, `SearchResultSet`, `Case`).
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import Case, Filter, SearchResultSet
from core.mappers import humanize, labelled_fields


def print_banner(console: Console, domain: str) -> None:
    title = Text("fogbugz-cli", style="bold cyan")
    subtitle = Text(domain or "(no domain configured)", style="dim")
    console.print(Panel(Text.assemble(title, "  ", subtitle), border_style="cyan"))


def build_filters_table(filters: list[Filter]) -> Table:
    table = Table(title="Filters")
    table.add_column("", style="green", no_wrap=True)
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Type", style="dim")
    for item in filters:
        table.add_row(
            "*" if item.is_current else "",
            item.filter_id,
            item.name,
            item.attributes.get("type", ""),
        )
    return table


def build_cases_table(result: SearchResultSet, columns: list[str]) -> Table:
    """Tabla de resultados; una columna por campo pedido (con etiqueta humana)."""

    title = result.description or "Search results"
    if result.count is not None:
        title = f"{title} ({result.count})"

    table = Table(title=title)
    table.add_column("Case", style="cyan", no_wrap=True)
    for name in columns:
        table.add_column(humanize(name), style="white")
    for case in result.cases:
        table.add_row(case.id, *(case.field(name) for name in columns))
    return table


def build_case_panel(case: Case) -> Panel:
    title = Text(f"Case {case.id}", style="bold yellow")

    details = Table.grid(padding=(0, 2))
    details.add_column(style="bold")
    details.add_column()
    for _name, label, value in labelled_fields(case):
        details.add_row(label, value)

    events = Text()
    if case.events:
        events.append("\nEvents:\n", style="bold")
        for event in case.events:
            events.append(f"- {event.description}\n")
    else:
        events.append("\nNo events.", style="dim")

    return Panel(Group(details, events), title=title, border_style="yellow")
