"""Gateway tests: SQL backend round trips and REST request shaping."""

from __future__ import annotations

from datetime import date
from typing import Any, List

import pytest
import requests

from motiv_quotes_web.gateway import (
    GatewayError,
    RestGateway,
    SqlGateway,
    build_gateway,
)


def _record(text="Hello", category="god", source="https://example.com"):
    return {"text": text, "source": source, "category": category}


def test_sql_insert_fills_server_defaults(sql_gateway: SqlGateway):
    quote = sql_gateway.insert(_record())
    assert quote.id is not None
    assert (quote.votes_interesting, quote.votes_mindblowing, quote.votes_false) == (
        0,
        0,
        0,
    )
    assert quote.created_in == date.today().year


def test_sql_list_filters_orders_and_limits(sql_gateway: SqlGateway, seeded):
    everything = sql_gateway.list_quotes()
    assert [q.votes_interesting for q in everything] == [9, 5, 3]

    gods = sql_gateway.list_quotes("god")
    assert {q.category for q in gods} == {"god"}

    assert len(sql_gateway.list_quotes(limit=2)) == 2
    ascending = sql_gateway.list_quotes(descending=False)
    assert [q.votes_interesting for q in ascending] == [3, 5, 9]


def test_sql_increment_is_relative_to_stored_value(sql_gateway: SqlGateway):
    quote = sql_gateway.insert(_record())
    sql_gateway.update(quote.id, {"votesFalse": 4})

    # A stale local copy still says 0; the store adds to its own value.
    bumped = sql_gateway.increment(quote.id, "votesFalse")
    assert bumped.votes_false == 5


def test_sql_update_rejects_non_vote_columns(sql_gateway: SqlGateway):
    quote = sql_gateway.insert(_record())
    with pytest.raises(ValueError):
        sql_gateway.update(quote.id, {"text": "rewritten"})
    with pytest.raises(ValueError):
        sql_gateway.increment(quote.id, "createdIn")


def test_sql_missing_quote_raises_gateway_error(sql_gateway: SqlGateway):
    with pytest.raises(GatewayError):
        sql_gateway.increment(424242, "votesFalse")


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None):
        self.status_code = status_code
        self._payload = payload
        self.text = "" if payload is None else str(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


class FakeSession:
    """Stand-in for :class:`requests.Session` that replays queued responses."""

    def __init__(self, *responses: Any):
        self.headers: dict = {}
        self.requests: List[dict] = []
        self._responses = list(responses)

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


ROW = {
    "id": 11,
    "text": "Hi",
    "source": "https://example.com",
    "category": "love",
    "votesInteresting": 1,
    "votesMindblowing": 0,
    "votesFalse": 0,
    "createdIn": 2024,
}


def _rest(session: FakeSession, **kwargs) -> RestGateway:
    return RestGateway("https://demo.supabase.co/", "anon-key", session=session, **kwargs)


def test_rest_list_builds_filter_order_and_limit():
    session = FakeSession(FakeResponse(payload=[ROW]))
    gateway = _rest(session)

    quotes = gateway.list_quotes("love")

    assert [q.id for q in quotes] == [11]
    sent = session.requests[0]
    assert sent["method"] == "GET"
    assert sent["url"] == "https://demo.supabase.co/rest/v1/quotes"
    assert sent["params"] == {
        "select": "*",
        "order": "votesInteresting.desc",
        "limit": 1000,
        "category": "eq.love",
    }
    assert session.headers["apikey"] == "anon-key"
    assert session.headers["Authorization"] == "Bearer anon-key"


def test_rest_list_all_sends_no_category_filter():
    session = FakeSession(FakeResponse(payload=[]))
    _rest(session).list_quotes(None)
    assert "category" not in session.requests[0]["params"]


def test_rest_insert_and_update_request_representation():
    session = FakeSession(
        FakeResponse(status_code=201, payload=[ROW]),
        FakeResponse(payload=[dict(ROW, votesFalse=1)]),
    )
    gateway = _rest(session)

    created = gateway.insert(dict(_record(category="love"), extra="ignored"))
    updated = gateway.update(created.id, {"votesFalse": 1})

    insert_call, update_call = session.requests
    assert insert_call["method"] == "POST"
    assert insert_call["json"] == [_record(category="love")]
    assert insert_call["headers"] == {"Prefer": "return=representation"}
    assert update_call["method"] == "PATCH"
    assert update_call["params"]["id"] == "eq.11"
    assert update_call["json"] == {"votesFalse": 1}
    assert updated.votes_false == 1


def test_rest_atomic_increment_uses_rpc():
    session = FakeSession(FakeResponse(payload=dict(ROW, votesMindblowing=1)))
    gateway = _rest(session, atomic_rpc=True)
    assert gateway.supports_atomic_increment is True

    quote = gateway.increment(11, "votesMindblowing")

    sent = session.requests[0]
    assert sent["url"] == "https://demo.supabase.co/rest/v1/rpc/increment_vote"
    assert sent["json"] == {"quote_id": 11, "column_name": "votesMindblowing"}
    assert quote.votes_mindblowing == 1


def test_rest_increment_without_rpc_is_unsupported():
    gateway = _rest(FakeSession())
    assert gateway.supports_atomic_increment is False
    with pytest.raises(NotImplementedError):
        gateway.increment(11, "votesFalse")


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(status_code=500, payload={"message": "down"}),
        FakeResponse(status_code=200, payload=None),
        requests.ConnectionError("refused"),
    ],
)
def test_rest_failures_raise_gateway_error(response):
    gateway = _rest(FakeSession(response))
    with pytest.raises(GatewayError):
        gateway.list_quotes()


def test_rest_empty_write_response_is_an_error():
    gateway = _rest(FakeSession(FakeResponse(payload=[])))
    with pytest.raises(GatewayError):
        gateway.update(11, {"votesFalse": 1})


def test_build_gateway_selects_backend(config, app):
    assert isinstance(build_gateway(config, app.config["DB_ENGINE"]), SqlGateway)

    config.backend = "rest"
    config.rest_url = "https://demo.supabase.co"
    config.rest_api_key = "anon-key"
    assert isinstance(build_gateway(config), RestGateway)

    config.backend = "carrier-pigeon"
    with pytest.raises(ValueError):
        build_gateway(config)
