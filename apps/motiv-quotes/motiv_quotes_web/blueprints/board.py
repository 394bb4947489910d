"""HTTP routes for the quote board."""

from __future__ import annotations

from typing import Any, Dict

from flask import (
    Blueprint,
    Response,
    abort,
    current_app,
    flash,
    jsonify,
    render_template,
    request,
    session,
)

from packages.motiv_common import MAX_TEXT_LENGTH, category_color

from .. import get_controller, limiter
from ..forms import remaining_characters
from ..services import QuoteBoardController, categories_for_filter, serialize_quote
from ..state import ALL_CATEGORIES

board_bp = Blueprint("board", __name__)

SESSION_CATEGORY_KEY = "current_category"

VOTE_BUTTONS = (
    ("votesInteresting", "👍"),
    ("votesMindblowing", "🤯"),
    ("votesFalse", "⛔️"),
)


def _submit_rate_limit_value() -> str:
    """Return the throttle applied to quote submissions."""

    return str(current_app.config.get("QUOTES_SUBMIT_RATE_LIMIT") or "10 per minute")


def _vote_rate_limit_value() -> str:
    """Return the throttle applied to votes."""

    return str(current_app.config.get("QUOTES_VOTE_RATE_LIMIT") or "60 per minute")


@board_bp.app_context_processor
def inject_board_helpers() -> Dict[str, Any]:
    """Expose registry metadata to Jinja templates."""

    return {
        "quote_categories": list(categories_for_filter()),
        "category_color": category_color,
        "vote_buttons": VOTE_BUTTONS,
        "max_text_length": MAX_TEXT_LENGTH,
    }


def _current_category() -> str:
    return session.get(SESSION_CATEGORY_KEY, ALL_CATEGORIES)


def _mounted_controller() -> QuoteBoardController:
    """Load the board for the category remembered in the session."""

    controller = get_controller()
    controller.mount(_current_category())
    return controller


def _render_board(controller: QuoteBoardController, status: int = 200):
    """Flash outstanding notices and render the board page."""

    for notice in controller.state.notices:
        flash(notice, "danger")
    controller.state.notices.clear()
    state = controller.state
    return (
        render_template(
            "board/index.html",
            board=controller.board,
            state=state,
            remaining=remaining_characters(state.form.text),
        ),
        status,
    )


@board_bp.get("/")
def index():
    """Render the board for the requested (or remembered) category."""

    category = request.args.get("category") or _current_category()
    session[SESSION_CATEGORY_KEY] = category
    controller = get_controller()
    controller.mount(category)
    if request.args.get("form") == "1":
        controller.board.open_form()
    return _render_board(controller)


@board_bp.post("/quotes")
@limiter.limit(_submit_rate_limit_value)
def submit_quote():
    """Validate and store a new quote, then show it at the top of the list."""

    controller = _mounted_controller()
    if controller.submit(request.form):
        flash("Quote added.", "success")
        return _render_board(controller)
    if controller.state.form.errors:
        flash("Please correct the highlighted errors.", "danger")
        return _render_board(controller, 400)
    return _render_board(controller, 502)


@board_bp.post("/quotes/<quote_id>/vote/<field>")
@limiter.limit(_vote_rate_limit_value)
def vote(quote_id: str, field: str):
    """Add one vote to a quote on the current board."""

    controller = _mounted_controller()
    if controller.state.notices:
        return _render_board(controller, 502)
    try:
        recorded = controller.vote(quote_id, field)
    except ValueError:
        abort(400)
    except LookupError:
        abort(404)
    return _render_board(controller, 200 if recorded else 502)


@board_bp.get("/quotes.json")
def export_quotes_json() -> Response:
    """Return the quotes for ``?category=`` (default: all) as JSON."""

    category = request.args.get("category") or ALL_CATEGORIES
    controller = get_controller()
    if not controller.mount(category):
        return jsonify({"error": controller.state.notices[-1]}), 502
    quotes = controller.state.quotes
    return jsonify(
        {
            "category": category,
            "count": len(quotes),
            "quotes": [serialize_quote(quote) for quote in quotes],
        }
    )


@board_bp.get("/health")
def health() -> Response:
    return jsonify({"status": "ok"})
