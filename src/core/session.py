"""Session Manager: dueño del token de autenticación.

Reglas:
- Con un token válido y sin `force_refresh` no hay tráfico de red.
- El logon es el único intercambio que viaja sin token.
- Un fallo de una petición no invalida el token: solo `force_refresh`
  (o `invalidate`) lo reemplaza.
"""

from __future__ import annotations

import logging
import threading

from core.domain.models import Credentials, Session
from core.errors import (
    AuthenticationError,
    ConfigurationError,
    MissingCredentialsError,
    ParseError,
    ServiceError,
    TransportError,
)
from core.interfaces.transport import ApiTransport
from core.mappers import raise_for_service_error
from core.response_tree import parse

logger = logging.getLogger(__name__)

LOGON_METHOD = "logon"


class SessionManager:
    """Mantiene la `Session` del proceso y la renueva mediante logon."""

    def __init__(
        self,
        credentials: Credentials,
        transport: ApiTransport,
        *,
        token: str | None = None,
    ) -> None:
        self._credentials = credentials
        self._transport = transport
        self._session = Session(token=token or "", valid=bool(token))
        self._lock = threading.Lock()

    @property
    def session(self) -> Session:
        with self._lock:
            return self._session.model_copy()

    def invalidate(self) -> None:
        with self._lock:
            self._session = Session()

    def ensure_token(self, force_refresh: bool = False) -> str:
        with self._lock:
            if self._session.valid and not force_refresh:
                return self._session.token

            token = self._logon()
            self._session = Session(token=token, valid=True)
            logger.info("Logged on to %s as %s", self._credentials.domain, self._credentials.email)
            return token

    def _logon(self) -> str:
        if not self._credentials.is_complete():
            missing = [
                name
                for name in ("domain", "email", "password")
                if not getattr(self._credentials, name)
            ]
            raise MissingCredentialsError(
                f"incomplete credentials, missing: {', '.join(missing)}",
                method=LOGON_METHOD,
            )

        params = {"email": self._credentials.email, "password": self._credentials.password}
        try:
            raw = self._transport.send(LOGON_METHOD, params, include_token=False)
            root = parse(raw)
            raise_for_service_error(root, method=LOGON_METHOD)
        except ConfigurationError:
            raise
        except ServiceError as exc:
            raise AuthenticationError(
                f"logon rejected: {exc.message}",
                code=exc.code,
                method=LOGON_METHOD,
            ) from exc
        except (TransportError, ParseError) as exc:
            raise AuthenticationError(
                f"logon exchange failed: {exc.message}",
                method=LOGON_METHOD,
            ) from exc

        # response -> <token> -> texto
        token_node = root.first_element()
        token = token_node.first_text() if token_node is not None else None
        if not token or not token.strip():
            raise AuthenticationError(
                "logon response carries no token",
                method=LOGON_METHOD,
            )
        return token.strip()
