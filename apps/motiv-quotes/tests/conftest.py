"""Test fixtures for the Motiv Quotes app."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Any, List, Mapping, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
REPO_ROOT = Path(__file__).resolve().parents[3]
for path in (PROJECT_ROOT, REPO_ROOT):
    if str(path) not in sys.path:
        sys.path.append(str(path))

from motiv_quotes_web import AppConfig, create_app
from motiv_quotes_web.gateway import GatewayError, QuoteGateway, SqlGateway
from packages.motiv_common import Quote


class RecordingGateway(QuoteGateway):
    """Wrap another gateway, recording calls and optionally failing them."""

    def __init__(self, inner: QuoteGateway):
        self.inner = inner
        self.calls: List[tuple] = []
        self.fail: set = set()
        self.supports_atomic_increment = inner.supports_atomic_increment

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail:
            raise GatewayError(f"{name} unavailable")

    def list_quotes(self, category: Optional[str] = None, **kwargs: Any) -> List[Quote]:
        self.calls.append(("list", category, kwargs))
        self._maybe_fail("list")
        return self.inner.list_quotes(category, **kwargs)

    def insert(self, record: Mapping[str, str]) -> Quote:
        self.calls.append(("insert", dict(record)))
        self._maybe_fail("insert")
        return self.inner.insert(record)

    def update(self, quote_id: Any, patch: Mapping[str, int]) -> Quote:
        self.calls.append(("update", quote_id, dict(patch)))
        self._maybe_fail("update")
        return self.inner.update(quote_id, patch)

    def increment(self, quote_id: Any, field: str) -> Quote:
        self.calls.append(("increment", quote_id, field))
        self._maybe_fail("increment")
        return self.inner.increment(quote_id, field)

    def calls_named(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]


@pytest.fixture()
def config(tmp_path: Path) -> AppConfig:
    """Return settings pointing at a throwaway SQLite database."""

    return AppConfig(
        backend="sql",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        secret_key="testing",
        csrf_enabled=False,
        ratelimit_enabled=False,
    )


@pytest.fixture()
def app(config: AppConfig):
    """Return a Flask app whose gateway records every round trip."""

    application = create_app(config)
    gateway = RecordingGateway(SqlGateway(application.config["DB_ENGINE"]))
    application.config.update(TESTING=True, QUOTE_GATEWAY=gateway)
    yield application


@pytest.fixture()
def gateway(app) -> RecordingGateway:
    return app.config["QUOTE_GATEWAY"]


@pytest.fixture()
def sql_gateway(app) -> SqlGateway:
    return app.config["QUOTE_GATEWAY"].inner


@pytest.fixture()
def client(app):
    """Return a Flask test client."""

    return app.test_client()


@pytest.fixture()
def seeded(sql_gateway: SqlGateway) -> List[Quote]:
    """Two ``god`` quotes with 5 and 3 interesting votes and one ``love`` with 9."""

    stored = []
    for text, category, votes in (
        ("God quote five", "god", 5),
        ("God quote three", "god", 3),
        ("Love quote nine", "love", 9),
    ):
        quote = sql_gateway.insert(
            {"text": text, "source": "https://example.com/q", "category": category}
        )
        stored.append(sql_gateway.update(quote.id, {"votesInteresting": votes}))
    return stored
