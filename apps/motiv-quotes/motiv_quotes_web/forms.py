"""Form parsing and validation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from packages.motiv_common import MAX_TEXT_LENGTH

ALLOWED_URL_SCHEMES = ("http", "https")


@dataclass(slots=True)
class QuoteFormData:
    """Validated submission returned by :func:`parse_quote_form`."""

    text: str
    source: str
    category: str

    def as_record(self) -> dict:
        return {"text": self.text, "source": self.source, "category": self.category}


def is_valid_http_url(value: str) -> bool:
    """Return ``True`` when ``value`` is an absolute ``http``/``https`` URL."""

    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ALLOWED_URL_SCHEMES and bool(parsed.netloc)


def remaining_characters(text: str) -> int:
    """Characters left before the quote text hits :data:`MAX_TEXT_LENGTH`."""

    return MAX_TEXT_LENGTH - len(text)


def parse_quote_form(
    form: Mapping[str, str]
) -> Tuple[Optional[QuoteFormData], List[str]]:
    """Validate a quote submission.

    Returns a tuple of ``(result, errors)``. ``result`` is ``None`` when
    validation fails, in which case no insert must be issued.
    """

    errors: List[str] = []
    raw_text = form.get("text", "")
    text = raw_text.strip()
    source = form.get("source", "").strip()
    category = form.get("category", "").strip()

    if not text:
        errors.append("Quote text is required.")
    if not is_valid_http_url(source):
        errors.append("Source must be a full http:// or https:// link.")
    if not category:
        errors.append("Category is required.")
    if len(raw_text) > MAX_TEXT_LENGTH:
        errors.append(f"Quote text must be {MAX_TEXT_LENGTH} characters or fewer.")

    if errors:
        return None, errors

    return QuoteFormData(text=text, source=source, category=category), []
