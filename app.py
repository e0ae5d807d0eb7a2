import logging
from logging.handlers import RotatingFileHandler
import os

from flask import Flask, render_template
from waitress import serve

from audit_logging import audit_logger, on_auth_event
from auth_context import AuthContext
from config import Config
from models import backend
from url_utils import build_property_path, canonical_url, site_origin


def create_app(config_class=Config, client_factory=None) -> Flask:
    """
    Application factory.

    `client_factory(url, key, options=...)` builds the Supabase client; it defaults to
    `supabase.create_client` and is swapped out in tests.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # make sure logs/ exists
    try:
        os.makedirs(app.config["LOG_DIR"], exist_ok=True)
    except OSError:
        pass

    # Logging
    configure_logging(app)

    # Hosted backend + sign-in state
    backend.init_app(app, client_factory=client_factory)
    auth = AuthContext(app)
    auth.subscribe(on_auth_event)

    # Blueprints
    from routes.auth_routes import auth_bp
    from routes.dashboard_routes import dashboard_bp
    from routes.public_routes import public_bp
    from routes.sitemap_routes import sitemap_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(sitemap_bp)

    register_template_helpers(app)

    @app.errorhandler(404)
    def not_found(error):
        return render_template("not_found.html", message="Page not found."), 404

    return app


def register_template_helpers(app: Flask) -> None:
    """Globals used by the templates."""

    @app.context_processor
    def inject_url_helpers():
        return {
            "property_path": build_property_path,
            "canonical_href": lambda path: canonical_url(path, site_origin()),
        }


LOG_HANDLER_NAME = "estato.file"


def configure_logging(app: Flask) -> None:
    """File-based logging for the app, werkzeug and the audit trail."""
    log_file = app.config["LOG_FILE"]

    handler = RotatingFileHandler(
        log_file, maxBytes=1_000_000, backupCount=5, encoding="utf-8"
    )
    handler.set_name(LOG_HANDLER_NAME)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    handler.setFormatter(formatter)
    handler.setLevel(logging.INFO)

    # werkzeug request logs go to the same file
    for logger in (app.logger, logging.getLogger("werkzeug"), audit_logger):
        _replace_file_handler(logger, handler)

    app.logger.setLevel(logging.INFO)
    audit_logger.setLevel(logging.INFO)


def _replace_file_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    """Swap in `handler`, closing the one left by an earlier `create_app`."""
    for old in list(logger.handlers):
        if old.get_name() == LOG_HANDLER_NAME:
            logger.removeHandler(old)
            old.close()
    logger.addHandler(handler)


# `flask --app app run` picks up create_app()
if __name__ == "__main__":
    app = create_app()
    try:
        serve(app, host="0.0.0.0", port=app.config["PORT"])
    except Exception as e:
        app.logger.error("Server failed to start: %s", e)
        raise
