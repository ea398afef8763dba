"""Application factory and app-wide configuration."""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from smartplan.app.api.routes import api_bp
from smartplan.config import AppSettings


def create_app(settings: Optional[AppSettings] = None) -> Flask:
    """Build the Flask app instance."""
    settings = settings or AppSettings.from_env()

    app = Flask(__name__)
    app.config["SMARTPLAN_SETTINGS"] = settings
    app.logger.setLevel(settings.log_level)
    logging.getLogger("smartplan").setLevel(settings.log_level)

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
    )

    app.register_blueprint(api_bp, url_prefix="/api")
    return app
