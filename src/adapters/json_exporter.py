"""Exportación JSON de las vistas tipadas.

Por qué JSON:
- Interoperabilidad con scripts y pipelines (jq, hojas de cálculo...).
- Permite guardar un caso o una búsqueda sin depender del render en terminal.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel


def view_payload(view: BaseModel | Sequence[BaseModel]) -> object:
    if isinstance(view, BaseModel):
        return view.model_dump(mode="json")
    return [item.model_dump(mode="json") for item in view]


def export_view_json(*, view: BaseModel | Sequence[BaseModel], output_path: Path) -> Path:
    """Exporta un `Case`, un `SearchResultSet` o una lista de `Filter` a JSON UTF-8."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(view_payload(view), ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
