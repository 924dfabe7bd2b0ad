"""Wrapper de httpx para la API del tracker.

Por qué un wrapper:
- Estandariza timeouts, headers y codificación del cuerpo en un solo sitio.
- Facilita testeo: se inyecta un `httpx.Client` con `MockTransport`.
"""

from __future__ import annotations

import logging
from typing import Mapping
from urllib.parse import quote

import httpx

from core.config import AppSettings
from core.errors import ConfigurationError, TransportError
from core.interfaces.transport import ApiTransport, TokenProvider

logger = logging.getLogger(__name__)

TOKEN_PARAM = "token"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def build_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` síncrono con los defaults de la aplicación.

    `transport` permite inyectar un `httpx.MockTransport` en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/xml, text/xml;q=0.9, */*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def encode_form(params: Mapping[str, str]) -> str:
    """Codifica `params` como `k=v&k=v`.

    Clave y valor se codifican por separado y sin caracteres seguros
    (`"a b"` -> `a%20b`, `","` -> `%2C`). El orden es el de inserción.
    """

    return "&".join(
        f"{quote(str(key), safe='')}={quote(str(value), safe='')}"
        for key, value in params.items()
    )


class HttpTransport(ApiTransport):
    """Transporte síncrono: un POST por llamada a `https://{domain}/api.asp?cmd=...`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.Client | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._owns_client = client is None
        self._client = client or build_client(self._settings)
        self.token_provider = token_provider

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def send(
        self,
        method: str,
        params: Mapping[str, str] | None = None,
        include_token: bool = True,
    ) -> bytes:
        if not self._settings.domain:
            raise ConfigurationError("domain is not configured", method=method or None)
        if not method:
            raise ConfigurationError("method name is empty")

        payload: dict[str, str] = {}
        if include_token:
            if self.token_provider is None:
                raise ConfigurationError("no token provider attached to the transport", method=method)
            # Snapshot: el token se lee una vez y queda fijado en esta petición.
            payload[TOKEN_PARAM] = self.token_provider()
        for key, value in (params or {}).items():
            if key == TOKEN_PARAM and include_token:
                continue
            payload[key] = value

        url = self._settings.api_url()
        body = encode_form(payload)
        logger.debug("POST %s cmd=%s params=%s", url, method, sorted(k for k in payload if k != TOKEN_PARAM))

        try:
            response = self._client.post(
                url,
                params={"cmd": method},
                content=body.encode("utf-8"),
                headers={"Content-Type": FORM_CONTENT_TYPE},
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"request failed: {exc}", method=method) from exc

        content = response.content
        logger.debug("cmd=%s -> HTTP %s (%d bytes)", method, response.status_code, len(content))
        if not response.is_success and not content.strip():
            raise TransportError(
                f"HTTP {response.status_code} with empty body",
                method=method,
                status_code=response.status_code,
            )
        return content
