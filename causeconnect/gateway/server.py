"""
Gateway: combines the auth, events, and pages blueprints into one app.
This is the local entrypoint for development.
"""

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, flash, jsonify, redirect, url_for

from causeconnect.auth_service.routes import GENERIC_ERROR, auth_bp
from causeconnect.auth_service.session import login_manager
from causeconnect.database.registry import init_stores
from causeconnect.database.stores import EventStore, SessionStore, StoreError, UserStore
from causeconnect.events_service.routes import events_bp
from causeconnect.gateway import config as settings
from causeconnect.pages_service.routes import pages_bp

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")

# Basic console logging during requests
logging.basicConfig(level=settings.LOG_LEVEL, format="[%(levelname)s] %(asctime)s - %(message)s")


def create_app(
    config: Optional[Dict[str, Any]] = None,
    user_store: Optional[UserStore] = None,
    event_store: Optional[EventStore] = None,
    session_store: Optional[SessionStore] = None,
) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        config (dict, optional): Overrides applied on top of the environment.
        user_store (UserStore, optional): Injected credential store.
        event_store (EventStore, optional): Injected event store.
        session_store (SessionStore, optional): Injected session store.

    Returns:
        Flask: The configured Flask application.

    Raises:
        RuntimeError: If SECRET_KEY is missing outside of testing, or the
            postgres backend has no DATABASE_URL.
    """
    app = Flask(__name__, template_folder=TEMPLATE_DIR)
    app.config.update(settings.default_config())
    if config:
        app.config.update(config)

    if not app.config.get("SECRET_KEY"):
        if not app.config.get("TESTING"):
            raise RuntimeError("SECRET_KEY is missing. Set it in .env")
        app.config["SECRET_KEY"] = "testing-secret"

    init_stores(app, user_store=user_store, event_store=event_store, session_store=session_store)
    login_manager.init_app(app)

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(events_bp)
    logging.info(f"Blueprints registered, store backend: {type(app.extensions['causeconnect'].users).__name__}")

    @app.errorhandler(StoreError)
    def store_error(error: StoreError):
        logging.error(f"[Gateway] Unhandled store failure: {error}", exc_info=error)
        flash(GENERIC_ERROR, "error")
        return redirect(url_for("pages.index"))

    # --- HEALTH CHECK ---
    @app.route("/health")
    def health():
        """
        Liveness check.
        """
        return jsonify({"status": "ok"}), 200

    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=settings.GATEWAY_PORT, debug=settings.LOG_LEVEL == "DEBUG")


if __name__ == "__main__":
    main()
