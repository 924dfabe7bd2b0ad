"""Mappers: árbol genérico -> vistas tipadas.

Responsabilidad:
- Proyectar `ResponseNode` en `Filter`, `SearchResultSet`, `Case` y `Event`.
- Campos opcionales ausentes -> "". Contenedores obligatorios ausentes
  (`<filters>`, `<cases>`) -> `MappingError`.
- Un nodo `<error>` del servicio se convierte en `ServiceError`.

Estructura esperada (el payload cuelga directamente de `<response>`):

    <response><filters><filter sFilter="..." status="current">Nombre</filter>...</filters></response>
    <response><description>...</description><cases count="N"><case ixBug="1">...</case></cases></response>
"""

from __future__ import annotations

from core.domain.models import Case, Event, Filter, ResponseNode, SearchResultSet
from core.errors import MappingError, ServiceError

EVENTS_FIELD = "events"
EVENT_DESCRIPTION_FIELD = "evtDescription"
CASE_ID_KEY = "ixBug"


def humanize(name: str) -> str:
    """Etiqueta legible para un identificador camel-case.

    Se corta desde la primera mayúscula: `ixBug` -> `Bug`, `sTitle` -> `Title`.
    Sin mayúsculas se devuelve tal cual (`status` -> `status`).
    """

    for index, char in enumerate(name):
        if char.isupper():
            return name[index:]
    return name


def labelled_fields(case: Case) -> list[tuple[str, str, str]]:
    """Triples (campo, etiqueta, valor) para la capa de presentación."""

    return [(name, humanize(name), value) for name, value in case.fields]


def raise_for_service_error(root: ResponseNode, *, method: str | None = None) -> None:
    error = root.first_child_named("error")
    if error is None:
        return
    code = error.attribute("code") or None
    message = error.text().strip() or "service returned an error"
    raise ServiceError(message, code=code, method=method)


def _require(parent: ResponseNode, tag: str, *, method: str | None) -> ResponseNode:
    node = parent.first_child_named(tag)
    if node is None:
        raise MappingError(f"response has no <{tag}> element", method=method)
    return node


def _optional_int(value: str) -> int | None:
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed >= 0 else None


def map_filters(root: ResponseNode) -> list[Filter]:
    raise_for_service_error(root, method="listFilters")
    container = _require(root, "filters", method="listFilters")
    return [
        Filter(name=(node.first_text() or "").strip(), attributes=dict(node.attributes))
        for node in container.children_named("filter")
    ]


def _map_event(node: ResponseNode) -> Event:
    description = node.first_child_named(EVENT_DESCRIPTION_FIELD)
    return Event(description=description.text() if description is not None else "")


def map_case(node: ResponseNode) -> Case:
    """Proyecta un `<case>`.

    `events` es el único campo que es a su vez una lista (de `<event>`); el
    resto son valores planos tomados de su propio texto.
    """

    fields: list[tuple[str, str]] = []
    events: list[Event] = []
    for child in node.elements():
        if child.tag == EVENTS_FIELD:
            events = [_map_event(event) for event in child.children_named("event")]
            continue
        fields.append((child.tag, child.text()))

    case_id = node.attribute(CASE_ID_KEY)
    if not case_id:
        case_id = next((value for name, value in fields if name == CASE_ID_KEY), "")

    return Case(id=case_id, attributes=dict(node.attributes), fields=fields, events=events)


def map_case_list(root: ResponseNode) -> SearchResultSet:
    raise_for_service_error(root, method="search")
    description = root.first_child_named("description")
    container = _require(root, "cases", method="search")
    return SearchResultSet(
        description=description.text() if description is not None else "",
        cases=[map_case(node) for node in container.children_named("case")],
        count=_optional_int(container.attribute("count")),
        total=_optional_int(container.attribute("totalHits")),
    )
