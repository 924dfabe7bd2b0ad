"""Modelos del dominio (Pydantic v2).

Contenido:
- `ResponseNode`: árbol genérico en el que se convierte toda respuesta de la API.
- Vistas tipadas de solo lectura sobre ese árbol: `Filter`, `Case`, `Event`,
  `SearchResultSet`.
- Estado de sesión: `Credentials` y `Session`.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Datos de acceso al servicio. Viven en memoria durante la sesión."""

    domain: str = Field(
        default="",
        description="Hostname del servicio (sin esquema ni path).",
    )
    email: str = Field(
        default="",
        description="Email con el que se hace logon.",
    )
    password: str = Field(
        default="",
        repr=False,
        description="Password; solo se usa en el intercambio de logon.",
    )

    def is_complete(self) -> bool:
        return bool(self.domain and self.email and self.password)


class Session(BaseModel):
    """Token de sesión. Nace vacío (inválido) y se valida tras un logon."""

    token: str = Field(default="", description="Token opaco devuelto por logon.")
    valid: bool = Field(default=False, description="True si el token es utilizable.")


class ResponseNode(BaseModel):
    """Nodo genérico del árbol de respuesta.

    Invariantes:
    - `children` conserva el orden del documento; los `str` son hojas de texto.
    - Las claves de `attributes` son únicas dentro del nodo.

    Los accesores con nombre sustituyen a los offsets posicionales: el código
    de los mappers expresa *qué* busca y no *dónde* está.
    """

    tag: str = Field(..., min_length=1, description="Nombre del elemento XML.")
    attributes: dict[str, str] = Field(
        default_factory=dict,
        description="Atributos del elemento.",
    )
    children: list[ResponseNode | str] = Field(
        default_factory=list,
        description="Hijos en orden de documento (nodos u hojas de texto).",
    )

    def elements(self) -> list[ResponseNode]:
        return [child for child in self.children if isinstance(child, ResponseNode)]

    def first_element(self) -> ResponseNode | None:
        for child in self.children:
            if isinstance(child, ResponseNode):
                return child
        return None

    def first_child_named(self, tag: str) -> ResponseNode | None:
        for child in self.children:
            if isinstance(child, ResponseNode) and child.tag == tag:
                return child
        return None

    def children_named(self, tag: str) -> list[ResponseNode]:
        return [child for child in self.elements() if child.tag == tag]

    def attribute(self, key: str, default: str = "") -> str:
        return self.attributes.get(key, default)

    def first_text(self) -> str | None:
        """Primera hoja de texto directa (o None si no hay)."""

        for child in self.children:
            if isinstance(child, str):
                return child
        return None

    def text(self) -> str:
        """Concatena las hojas de texto directas; "" si no hay ninguna."""

        return "".join(child for child in self.children if isinstance(child, str))


ResponseNode.model_rebuild()


class Filter(BaseModel):
    """Filtro guardado en el servidor (`<filter>`)."""

    name: str = Field(default="", description="Nombre visible del filtro.")
    attributes: dict[str, str] = Field(
        default_factory=dict,
        description="Atributos del nodo (type, sFilter, status...).",
    )

    @property
    def filter_id(self) -> str:
        return self.attributes.get("sFilter", "")

    @property
    def is_current(self) -> bool:
        return self.attributes.get("status") == "current"


class Event(BaseModel):
    """Entrada del historial de un caso."""

    description: str = Field(default="", description="Texto de `evtDescription`.")


class Case(BaseModel):
    """Caso (ticket) con los campos pedidos en la especificación de columnas."""

    id: str = Field(default="", description="Identificador numérico (`ixBug`).")
    attributes: dict[str, str] = Field(
        default_factory=dict,
        description="Atributos del nodo `<case>`.",
    )
    fields: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Pares (campo, valor) en orden de documento.",
    )
    events: list[Event] = Field(
        default_factory=list,
        description="Historial del caso, en orden cronológico.",
    )

    def field(self, name: str, default: str = "") -> str:
        for key, value in self.fields:
            if key == name:
                return value
        return default


class SearchResultSet(BaseModel):
    """Resultado de `search`: descripción de la query + casos."""

    description: str = Field(default="", description="Descripción legible de la query.")
    cases: list[Case] = Field(default_factory=list)
    count: int | None = Field(default=None, ge=0, description="Atributo `count` de `<cases>`.")
    total: int | None = Field(default=None, ge=0, description="Atributo `totalHits` si existe.")
