"""Application factory and app-wide configuration."""

from typing import Optional

from flask import Flask
from flask_cors import CORS

from backend.app.api.routes import api_bp
from backend.config import Settings
from backend.core.storage import ScenarioStore, create_store
from backend.log import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[ScenarioStore] = None) -> Flask:
    """Build the Flask app instance."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_format)

    app = Flask(__name__)

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
    )

    app.extensions["scenario_store"] = store or create_store(settings)
    app.register_blueprint(api_bp, url_prefix="/api")
    logger.info("FIRE API ready (store=%s)", type(app.extensions["scenario_store"]).__name__)
    return app
