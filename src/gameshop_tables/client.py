"""Blocking client for the table service."""

from __future__ import annotations

import json
import logging
from typing import Any

import requests

from gameshop_tables.errors import RequestError, ResponseError, SchemaError
from gameshop_tables.filters import Selection
from gameshop_tables.hierarchy import TableDefinition, resolve_definitions
from gameshop_tables.rows import TableEntry, load_rows
from gameshop_tables.settings import DEFAULT_TIMEOUT, Settings
from gameshop_tables.types import TableSchema, load_tables

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class TableClient:
    """Fetches table schemas and rows from the service.

    Requests are sent once; retries and scheduling are left to the caller.
    """

    def __init__(
        self,
        url: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.url = url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, session: requests.Session | None = None) -> TableClient:
        return cls(settings.url, session=session, timeout=settings.timeout)

    def _request(self, path: str, body: str | None = None) -> str:
        """Send a GET request and return the body text of a success response."""
        url = f"{self.url}{path}"
        logger.debug("GET %s (body: %s)", url, body)
        try:
            response = self.session.request(
                "GET", url, headers=JSON_HEADERS, data=body, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise RequestError(f"Request to {url} failed: {e}") from e

        text = response.text
        if not response.ok:
            logger.debug("GET %s -> %s", url, response.status_code)
            raise ResponseError(response.status_code, text)
        return text

    def schemas(self) -> list[TableSchema]:
        """Fetch the flat list of table schemas."""
        text = self._request("/api/tables")
        try:
            payload: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Invalid JSON in schema response: {e}") from e
        return load_tables(payload)

    def tables(self, strict: bool = False) -> list[TableDefinition]:
        """Fetch the table schemas and resolve them into definitions."""
        return resolve_definitions(self.schemas(), strict=strict)

    def get(self, table_id: str, selection: Selection | None = None) -> list[TableEntry]:
        """Fetch rows of a table.

        Args:
            table_id: Table identifier, as in `TableSchema.table_id`.
            selection: Rows to fetch; all rows when omitted.
        """
        if selection is None:
            selection = Selection.all()
        text = self._request(selection.path(table_id), selection.body())
        return load_rows(text, single=selection.is_by_id)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> TableClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
