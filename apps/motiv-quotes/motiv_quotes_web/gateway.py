"""Remote Data Gateway implementations.

The board never talks to storage directly. Everything goes through a
:class:`QuoteGateway`, which offers exactly the round trips the application
needs: list with an optional category filter, insert one quote, update one
quote by id, and (where the backend can do it atomically) increment a single
vote counter.

Two implementations ship with the app:

* :class:`RestGateway` speaks to a hosted PostgREST endpoint (the
  ``/rest/v1/<table>`` API exposed by Supabase-style backends) using a pooled
  :class:`requests.Session`.
* :class:`SqlGateway` stores quotes in a SQLAlchemy database and is used for
  local development and the test-suite.

Every failed round trip raises :class:`GatewayError`; callers decide how to
surface it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from urllib3.util.retry import Retry

from packages.motiv_common import VOTE_FIELDS, Quote

from .database import quotes, session_scope

logger = logging.getLogger(__name__)

DEFAULT_ORDER_FIELD = "votesInteresting"
DEFAULT_LIMIT = 1000
INSERT_FIELDS = ("text", "source", "category")


class GatewayError(RuntimeError):
    """Raised when a round trip to the quote store fails."""


class QuoteGateway(ABC):
    """Abstract interface over the remote quote store."""

    #: ``True`` when :meth:`increment` is an atomic server-side operation.
    supports_atomic_increment = False

    @abstractmethod
    def list_quotes(
        self,
        category: Optional[str] = None,
        *,
        order_by: str = DEFAULT_ORDER_FIELD,
        descending: bool = True,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Quote]:
        """Return quotes, optionally filtered by ``category``."""

    @abstractmethod
    def insert(self, record: Mapping[str, str]) -> Quote:
        """Create a quote from ``text``, ``source`` and ``category``."""

    @abstractmethod
    def update(self, quote_id: Any, patch: Mapping[str, int]) -> Quote:
        """Apply ``patch`` to the quote with ``quote_id`` and return the row."""

    def increment(self, quote_id: Any, field: str) -> Quote:
        """Add one to the vote column ``field`` on the store side.

        Gateways without an atomic primitive leave
        :attr:`supports_atomic_increment` unset and callers fall back to
        :meth:`update`.
        """

        raise NotImplementedError(
            f"{type(self).__name__} does not support atomic increments"
        )


def _check_vote_patch(patch: Mapping[str, int]) -> Dict[str, int]:
    unknown = set(patch) - set(VOTE_FIELDS)
    if unknown:
        raise ValueError(f"Only vote columns can be updated, got: {sorted(unknown)}")
    return dict(patch)


def _insert_payload(record: Mapping[str, str]) -> Dict[str, str]:
    return {field: record[field] for field in INSERT_FIELDS}


class SqlGateway(QuoteGateway):
    """Quote store backed by the SQLAlchemy ``quotes`` table."""

    supports_atomic_increment = True

    def __init__(self, engine: Engine):
        self._engine = engine

    def list_quotes(
        self,
        category: Optional[str] = None,
        *,
        order_by: str = DEFAULT_ORDER_FIELD,
        descending: bool = True,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Quote]:
        column = quotes.c[order_by]
        query = select(quotes).order_by(
            column.desc() if descending else column.asc(), quotes.c.id
        )
        if category is not None:
            query = query.where(quotes.c.category == category)
        query = query.limit(limit)
        try:
            with session_scope(self._engine) as session:
                rows = session.execute(query).mappings().all()
        except SQLAlchemyError as exc:
            raise GatewayError(f"Listing quotes failed: {exc}") from exc
        return [Quote.from_row(row) for row in rows]

    def insert(self, record: Mapping[str, str]) -> Quote:
        try:
            with session_scope(self._engine) as session:
                row = (
                    session.execute(
                        insert(quotes)
                        .values(**_insert_payload(record))
                        .returning(*quotes.c)
                    )
                    .mappings()
                    .one()
                )
        except SQLAlchemyError as exc:
            raise GatewayError(f"Inserting quote failed: {exc}") from exc
        return Quote.from_row(row)

    def update(self, quote_id: Any, patch: Mapping[str, int]) -> Quote:
        return self._execute_update(quote_id, _check_vote_patch(patch))

    def increment(self, quote_id: Any, field: str) -> Quote:
        if field not in VOTE_FIELDS:
            raise ValueError(f"Unknown vote column: {field}")
        return self._execute_update(quote_id, {field: quotes.c[field] + 1})

    def _execute_update(self, quote_id: Any, values: Mapping[str, Any]) -> Quote:
        try:
            with session_scope(self._engine) as session:
                row = (
                    session.execute(
                        update(quotes)
                        .where(quotes.c.id == quote_id)
                        .values(**values)
                        .returning(*quotes.c)
                    )
                    .mappings()
                    .one_or_none()
                )
        except SQLAlchemyError as exc:
            raise GatewayError(f"Updating quote {quote_id} failed: {exc}") from exc
        if row is None:
            raise GatewayError(f"Quote {quote_id} not found")
        return Quote.from_row(row)


class RestGateway(QuoteGateway):
    """Quote store reached through a hosted PostgREST API.

    Args:
        base_url: Project URL, for example ``https://abc.supabase.co``.
        api_key: Key sent in both the ``apikey`` and ``Authorization`` headers.
        table: Remote table holding the quotes.
        timeout: Per-request timeout in seconds.
        retries: Retry budget for idempotent requests (GET/HEAD only, so a
            retried write can never double count a vote).
        atomic_rpc: When ``True`` votes call the ``increment_vote`` stored
            procedure, which performs ``SET col = col + 1`` server-side.
        session: Optional pre-built session, mainly for tests.
    """

    INCREMENT_RPC = "increment_vote"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "quotes",
        timeout: float = 10.0,
        retries: int = 3,
        atomic_rpc: bool = False,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ValueError("A REST base URL is required for the rest backend")
        self._base_url = base_url.rstrip("/")
        self._table = table
        self._timeout = timeout
        self.supports_atomic_increment = atomic_rpc
        self._session = session or self._build_session(retries)
        self._session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            }
        )

    @staticmethod
    def _build_session(retries: int) -> requests.Session:
        session = requests.Session()
        adapter = HTTPAdapter(
            max_retries=Retry(
                total=retries,
                backoff_factor=0.5,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET", "HEAD"],
            )
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    @property
    def table_url(self) -> str:
        return f"{self._base_url}/rest/v1/{self._table}"

    def list_quotes(
        self,
        category: Optional[str] = None,
        *,
        order_by: str = DEFAULT_ORDER_FIELD,
        descending: bool = True,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Quote]:
        params: Dict[str, Any] = {
            "select": "*",
            "order": f"{order_by}.{'desc' if descending else 'asc'}",
            "limit": limit,
        }
        if category is not None:
            params["category"] = f"eq.{category}"
        rows = self._request("GET", self.table_url, params=params)
        return [Quote.from_row(row) for row in rows]

    def insert(self, record: Mapping[str, str]) -> Quote:
        rows = self._request(
            "POST",
            self.table_url,
            json=[_insert_payload(record)],
            headers={"Prefer": "return=representation"},
        )
        return self._single(rows, "insert")

    def update(self, quote_id: Any, patch: Mapping[str, int]) -> Quote:
        rows = self._request(
            "PATCH",
            self.table_url,
            params={"id": f"eq.{quote_id}", "select": "*"},
            json=_check_vote_patch(patch),
            headers={"Prefer": "return=representation"},
        )
        return self._single(rows, f"update of quote {quote_id}")

    def increment(self, quote_id: Any, field: str) -> Quote:
        if not self.supports_atomic_increment:
            return super().increment(quote_id, field)
        if field not in VOTE_FIELDS:
            raise ValueError(f"Unknown vote column: {field}")
        rows = self._request(
            "POST",
            f"{self._base_url}/rest/v1/rpc/{self.INCREMENT_RPC}",
            json={"quote_id": quote_id, "column_name": field},
        )
        if isinstance(rows, dict):
            rows = [rows]
        return self._single(rows, f"increment of quote {quote_id}")

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._session.request(
                method, url, timeout=self._timeout, **kwargs
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise GatewayError(f"{method} {url} failed: {exc}") from exc
        if response.status_code >= 400:
            logger.warning(
                "%s %s returned HTTP %s: %s",
                method,
                url,
                response.status_code,
                response.text[:200],
            )
            raise GatewayError(
                f"{method} {url} returned HTTP {response.status_code}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"{method} {url} returned invalid JSON") from exc

    @staticmethod
    def _single(rows: Any, action: str) -> Quote:
        if not isinstance(rows, list) or not rows:
            raise GatewayError(f"The store returned no row for the {action}")
        return Quote.from_row(rows[0])


def build_gateway(config, engine: Optional[Engine] = None) -> QuoteGateway:
    """Return the gateway selected by ``config.backend``.

    Args:
        config: :class:`~motiv_quotes_web.config.AppConfig` with backend
            settings.
        engine: SQLAlchemy engine, required for the ``"sql"`` backend.

    Raises:
        ValueError: For an unknown backend name or a missing engine.
    """

    if config.backend == "rest":
        return RestGateway(
            config.rest_url,
            config.rest_api_key,
            table=config.rest_table,
            timeout=config.rest_timeout,
            retries=config.rest_retries,
            atomic_rpc=config.rest_atomic_rpc,
        )
    if config.backend == "sql":
        if engine is None:
            raise ValueError("The sql backend needs a database engine")
        return SqlGateway(engine)
    raise ValueError(f"Unknown quotes backend: {config.backend!r}")
