"""Application factory for the golden visa cost calculator backend."""

import logging
import os
from warnings import warn

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import BadRequest, NotFound

from .http import problem_response
from .localization import (
    LOCALE_COOKIE,
    LOCALE_COOKIE_MAX_AGE,
    ensure_catalogues_complete,
    locale_from_path,
)
from .routes import register_routes
from .routes.config import get_configuration_metadata

ALLOWED_ORIGINS_ENV = "GOLDENVISA_ALLOWED_ORIGINS"

_LOGGER = logging.getLogger(__name__)


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def create_app() -> Flask:
    """Create and configure the Flask application instance.

    Raises :class:`~goldenvisa.backend.app.localization.LocalizationError` when a
    translation catalogue is missing keys present in the base locale.
    """

    ensure_catalogues_complete()

    app = Flask(__name__)

    allowed_origins = _parse_allowed_origins(os.getenv(ALLOWED_ORIGINS_ENV))

    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
    )

    register_routes(app)

    @app.after_request
    def remember_locale(response: Response) -> Response:
        """Persist the locale of localised page paths in a cookie."""

        locale = locale_from_path(request.path)
        if locale is not None:
            response.set_cookie(
                LOCALE_COOKIE,
                locale,
                max_age=LOCALE_COOKIE_MAX_AGE,
                path="/",
                samesite="Lax",
            )
        return response

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {"status": "ok", **get_configuration_metadata()}
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(NotFound)
    def handle_not_found(error: NotFound):
        """Return JSON problem payloads for unknown routes."""

        return problem_response(
            "not_found", status=404, message=error.description
        ).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Gracefully surface domain validation errors to clients."""

        _LOGGER.info("Rejected request to %s: %s", request.path, error)
        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    return app
