"""Common domain models and helpers shared across Motiv Quotes apps."""

from .categories import (
    CATEGORIES,
    DEFAULT_CATEGORY_COLOR,
    Category,
    category_color,
    find_category,
)
from .quotes import (
    MAX_TEXT_LENGTH,
    VOTE_FIELDS,
    Quote,
    is_disputed,
)

__all__ = [
    "CATEGORIES",
    "DEFAULT_CATEGORY_COLOR",
    "Category",
    "MAX_TEXT_LENGTH",
    "Quote",
    "VOTE_FIELDS",
    "category_color",
    "find_category",
    "is_disputed",
]
