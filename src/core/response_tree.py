"""Parser de respuestas: bytes XML -> `ResponseNode`.

Reglas:
- Función pura y determinista: mismos bytes, mismo árbol.
- XML mal formado -> `ParseError`. No hay recuperación ni reintento.
- El relleno de líneas en blanco antes del documento se descarta.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from core.domain.models import ResponseNode
from core.errors import ParseError

_LEADING_PADDING = b" \t\r\n"
_UTF8_BOM = b"\xef\xbb\xbf"
# Un `str` ya está decodificado: la declaración (y su `encoding=`) sobra.
_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


def _strip_padding(raw: bytes) -> bytes:
    data = raw.lstrip(_LEADING_PADDING)
    if data.startswith(_UTF8_BOM):
        data = data[len(_UTF8_BOM) :].lstrip(_LEADING_PADDING)
    return data


def _keep_text(text: str | None) -> bool:
    # El whitespace entre elementos es formato, no contenido.
    return bool(text) and not text.isspace()


def _to_node(element: ET.Element) -> ResponseNode:
    children: list[ResponseNode | str] = []
    if _keep_text(element.text):
        children.append(element.text)
    for sub in element:
        children.append(_to_node(sub))
        if _keep_text(sub.tail):
            children.append(sub.tail)
    return ResponseNode(tag=element.tag, attributes=dict(element.attrib), children=children)


def parse(raw: bytes | str) -> ResponseNode:
    """Convierte el cuerpo de una respuesta en el árbol genérico."""

    if isinstance(raw, str):
        data = _XML_DECLARATION.sub("", raw.lstrip("\ufeff"), count=1).encode("utf-8")
    else:
        data = raw
    data = _strip_padding(data)
    if not data:
        raise ParseError("empty response body")

    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ParseError(f"malformed XML response: {exc}") from exc
    return _to_node(root)
