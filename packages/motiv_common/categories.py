"""Fixed registry of quote categories.

The registry is static: the board filter, the submission form and the tag
colors on each quote all read from :data:`CATEGORIES`. Quotes stored with a
category missing from the registry can still be displayed; they simply render
with :data:`DEFAULT_CATEGORY_COLOR`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class Category:
    """A filterable quote label and its display color."""

    name: str
    color: str


CATEGORIES: Tuple[Category, ...] = (
    Category(name="god", color="#3b82f6"),
    Category(name="love", color="#ef4444"),
    Category(name="life", color="#16a34a"),
    Category(name="time", color="#eab308"),
    Category(name="wisdom", color="#8b5cf6"),
    Category(name="death", color="#1f2937"),
    Category(name="success", color="#14b8a6"),
    Category(name="happiness", color="#f97316"),
)

DEFAULT_CATEGORY_COLOR = "#6b7280"


def find_category(name: str) -> Optional[Category]:
    """Return the registry entry called ``name`` or ``None`` when unknown."""

    for category in CATEGORIES:
        if category.name == name:
            return category
    return None


def category_color(name: str) -> str:
    """Return the tag color for ``name``.

    Unknown names fall back to :data:`DEFAULT_CATEGORY_COLOR` so a quote
    tagged with a retired or misspelled category still renders.
    """

    category = find_category(name)
    if category is None:
        return DEFAULT_CATEGORY_COLOR
    return category.color
