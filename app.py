# app.py
import logging
from datetime import datetime

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

from config import Config
from models.database import init_db, TokenBlocklist
from services.errors import ServiceError
from services.notifications import SmtpNotifier


def _error(message, reason, status):
    return jsonify({"success": False, "message": message, "reason": reason}), status


def create_app(config_object=Config, notifier=None, clock=None):
    """Build the portal backend.

    ``notifier`` and ``clock`` default to SMTP delivery and ``datetime.utcnow``;
    tests pass their own.
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(logging.DEBUG if app.config["DEVELOPMENT"] else logging.INFO)

    CORS(app, origins=[app.config["FRONTEND_URL"]], supports_credentials=True)

    # === INIT DB ===
    init_db(app)

    app.extensions["notifier"] = notifier or SmtpNotifier.from_config(app.config)
    app.extensions["clock"] = clock or datetime.utcnow

    # === JWT ===
    jwt = JWTManager()
    jwt.init_app(app)

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        jti = jwt_payload.get("jti")
        if not jti:
            return True
        return TokenBlocklist.query.filter_by(jti=jti).first() is not None

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return _error("Token has been revoked", "token_revoked", 401)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return _error("Token expired", "token_expired", 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error_string):
        app.logger.debug("Invalid token: %s", error_string)
        return _error("Invalid token", "invalid_token", 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error_string):
        app.logger.debug("Missing token: %s", error_string)
        return _error("Missing Authorization Header", "missing_token", 401)

    # === ERROR HANDLERS ===
    @app.errorhandler(ServiceError)
    def handle_service_error(err):
        app.logger.debug("%s: %s", type(err).__name__, err.message)
        body, status = err.to_response()
        return jsonify(body), status

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        app.logger.debug("HTTPException: %s", e)
        # reqparse aborts carry per-field messages in e.data
        message = (getattr(e, "data", None) or {}).get("message", e.description)
        if isinstance(message, dict):
            message = "; ".join(f"{field}: {detail}" for field, detail in message.items())
            return _error(message, "validation_error", e.code)
        return _error(message, e.name.lower().replace(" ", "_"), e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_exception(e):
        app.logger.exception("Unhandled exception")
        body = {"success": False, "message": "Internal server error", "reason": "internal_error"}
        if app.config["DEVELOPMENT"]:
            body["error"] = str(e)
        return jsonify(body), 500

    # === ROUTES ===
    from routes import register_routes
    from commands import register_commands
    register_routes(app)
    register_commands(app)

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=application.config["PORT"], debug=application.config["DEVELOPMENT"])
