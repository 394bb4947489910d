"""Quote domain model.

:class:`Quote` mirrors one row of the remote ``quotes`` table. The remote
columns use camelCase names (``votesInteresting``, ``createdIn`` ...) while the
dataclass exposes snake_case attributes; :meth:`Quote.from_row` and
:meth:`Quote.to_row` translate between the two so gateways never leak column
names into the rest of the code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

MAX_TEXT_LENGTH = 250

VOTE_FIELDS: Tuple[str, ...] = ("votesInteresting", "votesMindblowing", "votesFalse")

_ATTRIBUTES = {
    "votesInteresting": "votes_interesting",
    "votesMindblowing": "votes_mindblowing",
    "votesFalse": "votes_false",
    "createdIn": "created_in",
}


def is_disputed(votes_interesting: int, votes_mindblowing: int, votes_false: int) -> bool:
    """Return ``True`` when false votes outweigh the positive votes combined."""

    return votes_interesting + votes_mindblowing < votes_false


@dataclass(frozen=True, slots=True)
class Quote:
    """A stored quote with its three independent vote counters."""

    id: Any
    text: str
    source: str
    category: str
    votes_interesting: int = 0
    votes_mindblowing: int = 0
    votes_false: int = 0
    created_in: Optional[int] = None

    @property
    def disputed(self) -> bool:
        """Whether the quote should carry the disputed marker."""

        return is_disputed(
            self.votes_interesting, self.votes_mindblowing, self.votes_false
        )

    def votes(self, field: str) -> int:
        """Return the current value of the vote column ``field``.

        Raises:
            KeyError: If ``field`` is not one of :data:`VOTE_FIELDS`.
        """

        if field not in VOTE_FIELDS:
            raise KeyError(field)
        return getattr(self, _ATTRIBUTES[field])

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Quote":
        """Build a :class:`Quote` from a remote row keyed by column name."""

        created_in = row.get("createdIn")
        return cls(
            id=row["id"],
            text=row["text"],
            source=row["source"],
            category=row["category"],
            votes_interesting=int(row.get("votesInteresting") or 0),
            votes_mindblowing=int(row.get("votesMindblowing") or 0),
            votes_false=int(row.get("votesFalse") or 0),
            created_in=int(created_in) if created_in is not None else None,
        )

    def to_row(self) -> Dict[str, Any]:
        """Return the quote keyed by remote column name."""

        return {
            "id": self.id,
            "text": self.text,
            "source": self.source,
            "category": self.category,
            "votesInteresting": self.votes_interesting,
            "votesMindblowing": self.votes_mindblowing,
            "votesFalse": self.votes_false,
            "createdIn": self.created_in,
        }
