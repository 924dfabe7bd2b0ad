"""Taxonomía de errores del cliente.

Reglas:
- Cada fallo llega al llamador como una excepción distinta e inspeccionable.
- `operation` y `method` identifican qué comando y qué `cmd=` de la API fallaron.
- El Core no reintenta ni re-autentica: eso queda en manos del llamador.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base de todos los errores del cliente."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        method: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.method = method

    def with_context(self, *, operation: str | None = None, method: str | None = None) -> "TrackerError":
        """Completa el contexto sin pisar el que ya traía el error."""

        if self.operation is None:
            self.operation = operation
        if self.method is None:
            self.method = method
        return self

    def __str__(self) -> str:
        context = "/".join(part for part in (self.operation, self.method) if part)
        if context:
            return f"[{context}] {self.message}"
        return self.message


class ConfigurationError(TrackerError):
    """Falta configuración (dominio, método, credenciales). Nunca toca la red."""


class TransportError(TrackerError):
    """Fallo del intercambio HTTP."""

    def __init__(self, message: str, *, status_code: int | None = None, **kwargs: str | None) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code


class AuthenticationError(TrackerError):
    """El logon no produjo un token utilizable."""

    def __init__(self, message: str, *, code: str | None = None, **kwargs: str | None) -> None:
        super().__init__(message, **kwargs)
        self.code = code


class MissingCredentialsError(ConfigurationError, AuthenticationError):
    """Credenciales incompletas: es a la vez error de config y de autenticación."""


class ParseError(TrackerError):
    """La respuesta no es XML bien formado."""


class MappingError(TrackerError):
    """XML válido pero sin la estructura esperada."""


class ServiceError(MappingError):
    """El servicio devolvió un nodo `<error>` en lugar del payload."""

    def __init__(self, message: str, *, code: str | None = None, **kwargs: str | None) -> None:
        super().__init__(message, **kwargs)
        self.code = code
