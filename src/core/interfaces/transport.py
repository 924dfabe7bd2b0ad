"""Contrato del transporte de la API.

Por qué Protocol:
- Contrato estructural (duck typing) sin herencia rígida.
- El Session Manager y los comandos solo conocen `send`; el adaptador httpx
  o un fake en tests son intercambiables.
"""

from __future__ import annotations

from typing import Callable, Mapping, Protocol, runtime_checkable

TokenProvider = Callable[[], str]


@runtime_checkable
class ApiTransport(Protocol):
    """Contrato mínimo de un transporte.

    Reglas de diseño:
    - `send` es síncrono: una sola petición en vuelo por llamada.
    - Devuelve el cuerpo crudo; parsear es responsabilidad de otro módulo.
    - `include_token=False` solo lo usa el Session Manager para el logon.
    """

    token_provider: TokenProvider | None

    def send(
        self,
        method: str,
        params: Mapping[str, str] | None = None,
        include_token: bool = True,
    ) -> bytes:
        """Envía `cmd=<method>` con `params` y devuelve el cuerpo de la respuesta."""

        ...
