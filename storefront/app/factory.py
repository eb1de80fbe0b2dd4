from __future__ import annotations

import logging
from flask import Flask, g, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from storefront.app.config import Config
from storefront.app.extensions import backend, cors, search_gate
from storefront.app.common.errors import ApiError
from storefront.app.common.request_context import init_request_id
from storefront.app.api.register import register_blueprints
from storefront.app.ui import init_ui


def create_app(config_object: type[Config] = Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)
    app.config["BACKEND_ENDPOINT"] = config_object.backend_endpoint()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    # Extensions
    backend.init_app(app)
    search_gate.init_app(app, backend)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}})

    # Request id
    @app.before_request
    def _before_request():
        init_request_id()

    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    register_blueprints(app)
    init_ui(app)

    # Error handlers
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return jsonify(err.to_dict(getattr(g, "request_id", None))), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        if not request.path.startswith("/api/"):
            return render_template("pages/error.html", error=err), err.code or 500

        # Normalize Werkzeug errors into our JSON shape
        payload = {
            "error": {
                "code": "http_error",
                "message": err.description,
                "details": {"name": err.name},
                "request_id": getattr(g, "request_id", None),
            }
        }
        return jsonify(payload), err.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled exception")
        if not request.path.startswith("/api/"):
            return render_template("pages/error.html", error=None), 500

        payload = {
            "error": {
                "code": "internal_error",
                "message": "Internal server error",
                "details": {},
                "request_id": getattr(g, "request_id", None),
            }
        }
        return jsonify(payload), 500

    return app
