# FILE: signlink/__init__.py
# DESCRIPTION: Initializes the signlink Flask app and registers routes and error handlers.

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from signlink.config import Settings
from signlink.core.engine import SigningEngine
from signlink.core.errors import SigningError
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging(
    name="signlink",
    logfile="signlink.log",
    level=None  # Uses LOG_LEVEL from environment if set
)


def build_engine(settings: Settings, clock=None) -> SigningEngine:
    """Wire database, storage and notifications for `settings`."""
    from signlink.db.registry import DocumentRegistry
    from signlink.db.session import create_session_factory, get_engine, init_db
    from signlink.storage import DocumentStorage

    db_engine = get_engine(settings.database_url)
    init_db(db_engine)
    return SigningEngine(
        settings=settings,
        registry=DocumentRegistry(create_session_factory(db_engine)),
        storage=DocumentStorage(settings.storage_root),
        clock=clock,
    )


def create_app(settings: Settings = None, engine: SigningEngine = None):
    """Create and configure the signlink Flask application."""
    from signlink.api.routes_api import api_bp
    from signlink.api.routes_signing import signing_bp

    settings = settings or (engine.settings if engine else Settings.from_env())
    engine = engine or build_engine(settings)

    app = Flask(__name__)
    app.config["SIGNLINK_SETTINGS"] = settings
    # Multipart/JSON overhead on top of the largest accepted PDF
    app.config["MAX_CONTENT_LENGTH"] = settings.max_pdf_bytes + 1024 * 1024
    app.extensions["signlink"] = engine

    # Register blueprints
    app.register_blueprint(api_bp)
    app.register_blueprint(signing_bp)

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"status": "ok"}, 200

    @app.errorhandler(SigningError)
    def handle_signing_error(error):
        logger.info(f"{error.code}: {error.message}")
        return jsonify({"error": error.to_dict()}), error.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error):
        return jsonify({"error": {"code": "PAYLOAD_TOO_LARGE", "message": "Request body too large"}}), 413

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"error": {"code": error.name.upper().replace(" ", "_"), "message": error.description}}), error.code

    # Global error handler
    @app.errorhandler(Exception)
    def handle_error(error):
        logger.error("Unhandled error occurred", exc_info=True)
        return jsonify({"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}}), 500

    logger.info("signlink application initialized successfully")
    return app
