"""Command operations against the tracker API.

`TrackerClient` owns the configuration, the session manager and the
transport, so nothing lives in module-level globals. Each operation is a
thin composition: transport -> parser -> mapper. The presentation layer
(CLI) only sees the typed views returned here.

Every operation except `logon` gets its token implicitly: the transport
asks the session manager for one when `include_token` is true.
"""

from __future__ import annotations

import logging
from typing import Mapping

from adapters.http_client import HttpTransport
from core.config import AppSettings
from core.domain.models import Case, Filter, ResponseNode, SearchResultSet
from core.errors import ConfigurationError, MappingError, TrackerError
from core.interfaces.transport import ApiTransport
from core.mappers import map_case_list, map_filters, raise_for_service_error
from core.response_tree import parse
from core.session import SessionManager

logger = logging.getLogger(__name__)

CASE_DETAIL_COLUMNS = "sTitle,sPriority,events"


def _normalize_max_results(value: int | str) -> int:
    try:
        parsed = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"max results must be a number, got {value!r}") from None
    if parsed < 1:
        raise ConfigurationError(f"max results must be >= 1, got {parsed}")
    return parsed


class TrackerClient:
    """Synchronous client: one outstanding request per call."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: ApiTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._owns_transport = transport is None
        self._transport = transport or HttpTransport(self._settings)
        self._sessions = SessionManager(
            self._settings.credentials(),
            self._transport,
            token=self._settings.token,
        )
        self._transport.token_provider = self._sessions.ensure_token

    def __enter__(self) -> "TrackerClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_transport and isinstance(self._transport, HttpTransport):
            self._transport.close()

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    def _call(self, operation: str, method: str, params: Mapping[str, str] | None = None) -> ResponseNode:
        try:
            root = parse(self._transport.send(method, params))
            raise_for_service_error(root, method=method)
        except TrackerError as exc:
            raise exc.with_context(operation=operation, method=method)
        return root

    def logon(self, force_refresh: bool = False) -> str:
        if not self._settings.domain:
            raise ConfigurationError("domain is not configured", operation="logon", method="logon")
        try:
            return self._sessions.ensure_token(force_refresh)
        except TrackerError as exc:
            raise exc.with_context(operation="logon", method="logon")

    def list_filters(self) -> list[Filter]:
        root = self._call("list_filters", "listFilters")
        try:
            return map_filters(root)
        except MappingError as exc:
            raise exc.with_context(operation="list_filters")

    def set_current_filter(self, filter_id: str) -> None:
        self._call("set_current_filter", "setCurrentFilter", {"sFilter": filter_id})
        logger.debug("Current filter set to %s", filter_id)

    def _search(
        self,
        operation: str,
        query: str,
        columns: str | None,
        max_results: int | str | None,
    ) -> ResponseNode:
        try:
            limit = _normalize_max_results(
                self._settings.default_max_results if max_results is None else max_results
            )
        except ConfigurationError as exc:
            raise exc.with_context(operation=operation, method="search")
        params = {
            "q": query,
            "cols": columns or self._settings.default_columns,
            "max": str(limit),
        }
        return self._call(operation, "search", params)

    def search(self, query: str, columns: str | None = None, max_results: int | str | None = None) -> ResponseNode:
        """Run `search` and return the raw response tree.

        Callers decide when to apply `map_case_list`; `search_cases` does both.
        """

        return self._search("search", query, columns, max_results)

    def search_cases(
        self,
        query: str,
        columns: str | None = None,
        max_results: int | str | None = None,
    ) -> SearchResultSet:
        root = self.search(query, columns, max_results)
        try:
            return map_case_list(root)
        except MappingError as exc:
            raise exc.with_context(operation="search")

    def start_work(self, case_id: str) -> None:
        self._call("start_work", "startWork", {"ixBug": case_id})

    def stop_work(self) -> None:
        self._call("stop_work", "stopWork")

    def show_case_details(self, case_id: str) -> Case:
        root = self._search("show_case_details", case_id, CASE_DETAIL_COLUMNS, 1)
        try:
            result = map_case_list(root)
            if not result.cases:
                raise MappingError(f"case {case_id} not found")
            return result.cases[0]
        except MappingError as exc:
            raise exc.with_context(operation="show_case_details", method="search")

    def case_url(self, case_id: str) -> str:
        if not self._settings.domain:
            raise ConfigurationError("domain is not configured", operation="open_case")
        return f"https://{self._settings.domain}/default.asp?{case_id}"
