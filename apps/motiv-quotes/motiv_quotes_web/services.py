"""Board orchestration: gateway round trips reported into :class:`QuoteBoard`."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from packages.motiv_common import CATEGORIES, VOTE_FIELDS, Category, Quote

from .forms import parse_quote_form
from .gateway import DEFAULT_LIMIT, GatewayError, QuoteGateway
from .state import QuoteBoard

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "There was a problem getting data"
INSERT_FAILED_MESSAGE = "There was a problem saving your quote."
VOTE_FAILED_MESSAGE = "There was a problem recording your vote."

SAMPLE_QUOTES: List[dict] = [
    {
        "text": "The only way to do great work is to love what you do.",
        "source": "https://en.wikiquote.org/wiki/Steve_Jobs",
        "category": "success",
    },
    {
        "text": "Time is what we want most, but what we use worst.",
        "source": "https://en.wikiquote.org/wiki/William_Penn",
        "category": "time",
    },
    {
        "text": "The unexamined life is not worth living.",
        "source": "https://en.wikiquote.org/wiki/Socrates",
        "category": "wisdom",
    },
    {
        "text": "Where there is love there is life.",
        "source": "https://en.wikiquote.org/wiki/Mahatma_Gandhi",
        "category": "love",
    },
]


class QuoteBoardController:
    """Issues gateway calls on behalf of a :class:`QuoteBoard`.

    Each operation performs at most one round trip. Gateway failures are
    logged, recorded on the board as a notice and never re-raised; the board
    is always left in a usable state.
    """

    def __init__(
        self,
        gateway: QuoteGateway,
        board: Optional[QuoteBoard] = None,
        *,
        limit: int = DEFAULT_LIMIT,
    ):
        self.gateway = gateway
        self.board = board or QuoteBoard()
        self.limit = limit

    @property
    def state(self):
        return self.board.state

    def reload(self) -> bool:
        """Run one list query for the current category."""

        seq = self.board.begin_load()
        category = self.board.category_filter
        try:
            quotes = self.gateway.list_quotes(category, limit=self.limit)
        except GatewayError as exc:
            logger.error("Loading quotes for %s failed: %s", category or "all", exc)
            self.board.load_failed(seq, LOAD_FAILED_MESSAGE)
            return False
        return self.board.quotes_loaded(seq, quotes)

    def mount(self, category: str) -> bool:
        """Initial load of the board filtered by ``category``."""

        self.board.set_category(category)
        return self.reload()

    def change_category(self, category: str) -> bool:
        """Select ``category`` and reload when the selection changed."""

        if not self.board.set_category(category):
            return True
        return self.reload()

    def submit(self, form: Mapping[str, str]) -> bool:
        """Validate and insert a quote from submitted form values.

        Returns ``True`` when the quote was stored and prepended. Validation
        errors are left on ``state.form.errors`` and no insert is issued.
        """

        form_state = self.state.form
        if form_state.is_uploading:
            logger.info("Ignoring submission while an upload is in flight")
            return False

        form_state.text = form.get("text", "")
        form_state.source = form.get("source", "")
        form_state.category = form.get("category", "")
        self.board.open_form()

        data, errors = parse_quote_form(form)
        if errors or data is None:
            form_state.errors = errors
            return False

        self.board.begin_upload()
        try:
            quote = self.gateway.insert(data.as_record())
        except GatewayError as exc:
            logger.error("Inserting quote failed: %s", exc)
            self.board.upload_failed(INSERT_FAILED_MESSAGE)
            return False
        self.board.quote_inserted(quote)
        logger.info("Stored quote %s in %s", quote.id, quote.category)
        return True

    def vote(self, quote_id: Any, field: str) -> bool:
        """Add one vote of kind ``field`` to the quote with ``quote_id``.

        Raises:
            ValueError: If ``field`` is not a vote column.
            LookupError: If the quote is not on the board.
        """

        if field not in VOTE_FIELDS:
            raise ValueError(f"Unknown vote column: {field}")
        quote = self.board.find(quote_id)
        if quote is None:
            raise LookupError(f"Quote {quote_id} is not on the board")
        if not self.board.begin_vote(quote.id):
            logger.info(
                "Ignoring vote on quote %s while another is in flight", quote.id
            )
            return False

        try:
            if self.gateway.supports_atomic_increment:
                updated = self.gateway.increment(quote.id, field)
            else:
                updated = self.gateway.update(
                    quote.id, {field: quote.votes(field) + 1}
                )
        except GatewayError as exc:
            logger.error("Voting %s on quote %s failed: %s", field, quote.id, exc)
            self.board.vote_failed(quote.id, VOTE_FAILED_MESSAGE)
            return False
        self.board.quote_voted(updated)
        return True


def categories_for_filter() -> Iterable[Category]:
    """Return categories presented by the filter sidebar and the form."""

    return CATEGORIES


def serialize_quote(quote: Quote) -> dict:
    """JSON-ready representation of a quote including its disputed flag."""

    payload = quote.to_row()
    payload["disputed"] = quote.disputed
    return payload


def seed_quotes(
    gateway: QuoteGateway, records: Iterable[Mapping[str, str]] = SAMPLE_QUOTES
) -> List[Quote]:
    """Insert ``records`` through ``gateway`` and return the stored quotes."""

    stored = [gateway.insert(record) for record in records]
    logger.info("Seeded %d quotes", len(stored))
    return stored
