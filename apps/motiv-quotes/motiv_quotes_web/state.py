"""Board state container.

All mutable state the board page depends on lives in one :class:`BoardState`
and changes only through the named actions on :class:`QuoteBoard`:

* ``set_category`` / ``begin_load`` / ``quotes_loaded`` / ``load_failed``
  drive the reload cycle. Every list query is tagged with a sequence number
  and only the response to the most recent query is applied.
* ``begin_upload`` / ``quote_inserted`` / ``upload_failed`` drive the
  submission form. ``is_uploading`` blocks a second submission.
* ``begin_vote`` / ``quote_voted`` / ``vote_failed`` drive voting. A quote
  with a vote in flight refuses further votes until the round trip ends.

The container performs no I/O; :mod:`motiv_quotes_web.services` issues the
gateway calls and reports their outcome back through these actions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Set

from packages.motiv_common import Quote

ALL_CATEGORIES = "all"

VIEW_LOADER = "loader"
VIEW_LIST = "list"
VIEW_EMPTY = "empty"


@dataclass(slots=True)
class FormState:
    """Inputs and progress flag of the submission form."""

    text: str = ""
    source: str = ""
    category: str = ""
    is_uploading: bool = False
    errors: List[str] = field(default_factory=list)

    def clear(self) -> None:
        self.text = ""
        self.source = ""
        self.category = ""
        self.errors = []


@dataclass(slots=True)
class BoardState:
    """Everything the board page renders from."""

    quotes: List[Quote] = field(default_factory=list)
    current_category: str = ALL_CATEGORIES
    is_loading: bool = False
    show_form: bool = False
    form: FormState = field(default_factory=FormState)
    updating: Set[str] = field(default_factory=set)
    load_seq: int = 0
    notices: List[str] = field(default_factory=list)


def _key(quote_id: Any) -> str:
    return str(quote_id)


class QuoteBoard:
    """Applies board actions to a :class:`BoardState`."""

    def __init__(self, state: Optional[BoardState] = None):
        self.state = state or BoardState()

    # -- filter -----------------------------------------------------------

    def set_category(self, name: str) -> bool:
        """Select ``name`` as the current filter.

        Returns ``True`` when the selection changed and a reload is due.
        Names are not validated; an unknown category simply loads nothing.
        """

        if name == self.state.current_category:
            return False
        self.state.current_category = name
        return True

    @property
    def category_filter(self) -> Optional[str]:
        """Category to filter the list query by, ``None`` for all quotes."""

        if self.state.current_category == ALL_CATEGORIES:
            return None
        return self.state.current_category

    # -- reload -----------------------------------------------------------

    def begin_load(self) -> int:
        """Enter the loading state and return the new query's sequence number."""

        self.state.load_seq += 1
        self.state.is_loading = True
        return self.state.load_seq

    def quotes_loaded(self, seq: int, quotes: Iterable[Quote]) -> bool:
        """Replace the list wholesale if ``seq`` is the latest query."""

        if seq != self.state.load_seq:
            return False
        self.state.quotes = list(quotes)
        self.state.is_loading = False
        return True

    def load_failed(self, seq: int, message: str) -> bool:
        """Leave loading without touching the (possibly stale) list."""

        if seq != self.state.load_seq:
            return False
        self.state.is_loading = False
        self.state.notices.append(message)
        return True

    # -- submission form --------------------------------------------------

    def open_form(self) -> None:
        self.state.show_form = True

    def begin_upload(self) -> bool:
        """Mark the form as uploading; ``False`` if an upload is in flight."""

        if self.state.form.is_uploading:
            return False
        self.state.form.is_uploading = True
        self.state.form.errors = []
        return True

    def quote_inserted(self, quote: Quote) -> None:
        """Prepend the stored quote, then clear and close the form."""

        self.state.quotes.insert(0, quote)
        self.state.form.clear()
        self.state.form.is_uploading = False
        self.state.show_form = False

    def upload_failed(self, message: str) -> None:
        """Keep the form open with its values and leave the list alone."""

        self.state.form.is_uploading = False
        self.state.notices.append(message)

    # -- voting -----------------------------------------------------------

    def find(self, quote_id: Any) -> Optional[Quote]:
        key = _key(quote_id)
        for quote in self.state.quotes:
            if _key(quote.id) == key:
                return quote
        return None

    def is_updating(self, quote_id: Any) -> bool:
        return _key(quote_id) in self.state.updating

    def begin_vote(self, quote_id: Any) -> bool:
        """Raise the per-quote guard; ``False`` if a vote is already in flight."""

        key = _key(quote_id)
        if key in self.state.updating:
            return False
        self.state.updating.add(key)
        return True

    def quote_voted(self, quote: Quote) -> None:
        """Swap in the stored row for the entry with the same id."""

        key = _key(quote.id)
        self.state.quotes = [
            quote if _key(existing.id) == key else existing
            for existing in self.state.quotes
        ]
        self.state.updating.discard(key)

    def vote_failed(self, quote_id: Any, message: str) -> None:
        self.state.updating.discard(_key(quote_id))
        self.state.notices.append(message)

    # -- rendering --------------------------------------------------------

    @property
    def view_mode(self) -> str:
        """Which region the page shows below the filter."""

        if self.state.is_loading:
            return VIEW_LOADER
        if not self.state.quotes:
            return VIEW_EMPTY
        return VIEW_LIST

    @property
    def count(self) -> int:
        return len(self.state.quotes)
