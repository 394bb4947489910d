"""Motiv Quotes Flask application factory."""

from __future__ import annotations

from typing import Any, Optional

from flask import Flask, current_app, g
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect

from .config import AppConfig, load_config
from .database import create_db_engine, init_schema
from .gateway import QuoteGateway, build_gateway
from .services import QuoteBoardController

csrf = CSRFProtect()
limiter = Limiter(key_func=get_remote_address)


def create_app(
    config: AppConfig | None = None, gateway: Optional[QuoteGateway] = None
) -> Flask:
    """Build and configure the Motiv Quotes application instance.

    Args:
        config: Optional :class:`AppConfig` override. When ``None`` the helper
            loads configuration via :func:`load_config`.
        gateway: Optional pre-built :class:`QuoteGateway`. When ``None`` the
            gateway is chosen by ``config.backend``.

    Returns:
        Flask: Initialised application. The gateway is stored on
        ``app.config['QUOTE_GATEWAY']`` for the request-scoped controller.

    External Dependencies:
        * Uses :func:`create_db_engine` and :func:`init_schema` to prepare the
          local schema when the ``sql`` backend is selected.
        * Registers :mod:`flask_wtf` CSRF protection and :mod:`flask_limiter`
          throttles on the write endpoints.
    """

    app = Flask(__name__)
    app_config = config or load_config()
    app.config.update(
        SECRET_KEY=app_config.secret_key,
        WTF_CSRF_ENABLED=app_config.csrf_enabled,
        RATELIMIT_ENABLED=app_config.ratelimit_enabled,
        RATELIMIT_STORAGE_URI=app_config.ratelimit_storage_uri,
        QUOTES_QUERY_LIMIT=app_config.query_limit,
        QUOTES_SUBMIT_RATE_LIMIT=app_config.submit_rate_limit,
        QUOTES_VOTE_RATE_LIMIT=app_config.vote_rate_limit,
    )

    engine = None
    if app_config.backend == "sql":
        engine = create_db_engine(app_config.database_url)
        init_schema(engine)
    app.config["DB_ENGINE"] = engine
    app.config["QUOTE_GATEWAY"] = gateway or build_gateway(app_config, engine)
    app.logger.info(
        "Motiv Quotes using %s gateway", type(app.config["QUOTE_GATEWAY"]).__name__
    )

    csrf.init_app(app)
    limiter.init_app(app)

    from .blueprints.board import board_bp

    app.register_blueprint(board_bp)

    @app.teardown_appcontext
    def teardown(_: Any) -> None:
        g.pop("board_controller", None)

    @app.cli.command("init-db")
    def init_db_command() -> None:
        """Initialize the local quotes table."""

        import click

        if engine is None:
            click.echo("The configured backend has no local database.")
            return
        init_schema(engine)
        click.echo("Database initialized.")

    @app.cli.command("seed-quotes")
    def seed_quotes_command() -> None:
        """Insert a handful of sample quotes through the configured gateway."""

        import click

        from .services import seed_quotes

        stored = seed_quotes(app.config["QUOTE_GATEWAY"])
        click.echo(f"Seeded {len(stored)} quotes.")

    return app


def get_controller() -> QuoteBoardController:
    """Return the board controller bound to the active request.

    Returns:
        QuoteBoardController: Lazily constructed instance stored on
        :mod:`flask.g` so a request works against a single board.
    """

    if not hasattr(g, "board_controller"):
        g.board_controller = QuoteBoardController(
            current_app.config["QUOTE_GATEWAY"],
            limit=current_app.config["QUOTES_QUERY_LIMIT"],
        )
    return g.board_controller


__all__ = ["create_app", "AppConfig", "get_controller"]
