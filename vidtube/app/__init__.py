"""
app/__init__.py: Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time, which gives:
           - Multiple isolated test app instances
           - Clean separation between app creation and app startup
           - Alembic to import the models without starting the server

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Configure logging from LOG_LEVEL
  3. Initialise extensions (SQLAlchemy, Marshmallow) via init_app()
  4. Build the PasswordHasher and TokenIssuer from config
  5. Register all route blueprints under /api/v1
  6. Register global error handlers (AppError → JSON, Exception → 500)

Note on model imports:
  All model classes are imported inside create_app() so that SQLAlchemy's
  metadata is populated before Alembic inspects it. They are not used
  directly here: the import side-effect is sufficient.
"""

from __future__ import annotations

import logging
import traceback

from flask import Flask, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from vidtube.config import config_by_name, validate_production_config


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str = "development") -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Resolved via config_by_name in config.py.
                     Defaults to "development".

    Returns:
        A fully configured Flask app ready to serve requests.
    """
    app = Flask(__name__)
    # "/api/v1/videos" and "/api/v1/videos/" reach the same handler.
    app.url_map.strict_slashes = False

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    _configure_logging(app)

    # ── Extensions ─────────────────────────────────────────────────────────
    # Import here (not at module top) to avoid circular imports.
    from vidtube.app.extensions import PASSWORD_HASHER_KEY, TOKEN_ISSUER_KEY, db, ma
    from vidtube.app.security import PasswordHasher, TokenIssuer, TokenSettings

    db.init_app(app)
    ma.init_app(app)

    app.extensions[PASSWORD_HASHER_KEY] = PasswordHasher(app.config["BCRYPT_LOG_ROUNDS"])
    app.extensions[TOKEN_ISSUER_KEY] = TokenIssuer(TokenSettings.from_config(app.config))

    # ── Model registration ─────────────────────────────────────────────────
    # Import all models so that SQLAlchemy's MetaData is populated.
    # Imported for mapper registration only.
    with app.app_context():
        from vidtube.app.models import (  # noqa: F401
            comment,
            like,
            playlist,
            subscription,
            tweet,
            user,
            video,
            watch_history,
        )

    # ── Blueprints ─────────────────────────────────────────────────────────
    _register_blueprints(app)

    # ── Error handlers ─────────────────────────────────────────────────────
    _register_error_handlers(app)
    _register_cors(app)

    return app


def _configure_logging(app: Flask) -> None:
    """
    Applies LOG_LEVEL to the app logger and to the vidtube.* loggers used by
    the service layer.
    """
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    app.logger.setLevel(level)
    package_logger = logging.getLogger("vidtube")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))
        package_logger.addHandler(handler)


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under the /api/v1 prefix.

    Blueprint names match the route files in app/routes/.
    The url_prefix is set here so individual route files only specify
    the path relative to their resource (e.g. "/" and "/<int:id>").
    """
    from vidtube.app.routes.auth import auth_bp
    from vidtube.app.routes.comments import comments_bp
    from vidtube.app.routes.dashboard import dashboard_bp
    from vidtube.app.routes.health import health_bp
    from vidtube.app.routes.likes import likes_bp
    from vidtube.app.routes.playlists import playlists_bp
    from vidtube.app.routes.subscriptions import subscriptions_bp
    from vidtube.app.routes.tweets import tweets_bp
    from vidtube.app.routes.users import users_bp
    from vidtube.app.routes.videos import videos_bp

    app.register_blueprint(health_bp,        url_prefix="/api/v1")
    app.register_blueprint(auth_bp,          url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp,         url_prefix="/api/v1/users")
    app.register_blueprint(videos_bp,        url_prefix="/api/v1/videos")
    app.register_blueprint(comments_bp,      url_prefix="/api/v1/comments")
    app.register_blueprint(likes_bp,         url_prefix="/api/v1/likes")
    app.register_blueprint(subscriptions_bp, url_prefix="/api/v1/subscriptions")
    app.register_blueprint(playlists_bp,     url_prefix="/api/v1/playlists")
    app.register_blueprint(tweets_bp,        url_prefix="/api/v1/tweets")
    app.register_blueprint(dashboard_bp,     url_prefix="/api/v1/dashboard")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError        → structured JSON error envelope with the correct HTTP status
      ValidationError → marshmallow schema errors formatted as MISSING_FIELD /
                        INVALID_FIELD / <registered code> responses (400)
      HTTPException   → unknown route / wrong method in the same envelope
      Exception       → generic INTERNAL_ERROR (500); traceback logged

    Stack traces never leave the server: only
    {"error": {"code": "INTERNAL_ERROR", "message": "..."}} is returned and the
    traceback goes to the app logger.
    """
    from vidtube.app.errors import AppError, ErrorCode

    known_codes = {value for name, value in vars(ErrorCode).items() if name.isupper()}

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """
        Converts an AppError raised anywhere in the request lifecycle
        (middleware, service, route) into the standard error envelope.

        Routes never catch AppError: they let it propagate here.
        """
        if error.http_status >= 500:
            app.logger.error("AppError %s: %s", error.code, error.message)
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """
        Converts marshmallow ValidationError into the standard error envelope.

        Marshmallow raises ValidationError with a messages dict keyed by field
        name. Only the FIRST error is returned: one error, not many.

        A message that is itself a registered ErrorCode (e.g. WEAK_PASSWORD)
        becomes the code, with a default human message from _code_to_message().
        """
        messages = error.messages  # e.g. {"email": ["INVALID_EMAIL"]}

        field = None
        raw_message = "Invalid input."

        if isinstance(messages, dict):
            for field_name, field_errors in messages.items():
                field = field_name if field_name != "_schema" else None

                if isinstance(field_errors, list):
                    raw_message = field_errors[0] if field_errors else "Invalid value."
                elif isinstance(field_errors, dict):
                    # Nested schema errors: surface the first inner message.
                    inner = next(iter(field_errors.values()), ["Invalid value."])
                    raw_message = inner[0] if isinstance(inner, list) and inner else str(inner)
                else:
                    raw_message = str(field_errors)
                break
        elif isinstance(messages, list):
            raw_message = messages[0] if messages else "Invalid input."

        if raw_message in known_codes:
            code = raw_message
            message = _code_to_message(code)
        elif str(raw_message).startswith("Missing data for required field"):
            code = ErrorCode.MISSING_FIELD
            message = raw_message
        else:
            code = ErrorCode.INVALID_FIELD
            message = raw_message

        response_body = {"error": {"code": code, "message": message}}
        if field is not None:
            response_body["error"]["field"] = field

        return jsonify(response_body), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        if error.code == 404:
            code = ErrorCode.NOT_FOUND
        elif error.code == 405:
            code = ErrorCode.METHOD_NOT_ALLOWED
        elif error.code is not None and error.code >= 500:
            code = ErrorCode.INTERNAL_ERROR
        else:
            code = ErrorCode.INVALID_FIELD
        return jsonify({
            "error": {
                "code": code,
                "message": error.description,
            }
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Catches all unhandled exceptions and returns a generic 500 response.

        The full traceback is logged to the application logger. Stack traces
        NEVER leave the server in the response body.
        """
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred. Please try again later.",
            }
        }), 500


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for browser-based local development.

    Enabled when DEBUG or TESTING is true so a frontend served from another
    local port can call the API. Credentials are allowed because browser
    sessions ride on the accessToken/refreshToken cookies.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        if allow_all and origin:
            # Credentialed requests need the exact origin, never "*".
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"

        return response


def _code_to_message(code: str) -> str:
    """
    Returns a human-readable default message for a known error code.
    Used when a ValidationError message IS the error code constant itself
    (e.g. WEAK_PASSWORD raised as ValidationError in schemas).
    """
    from vidtube.app.validators import PASSWORD_MAX_LENGTH, PASSWORD_SYMBOLS

    _messages = {
        "INVALID_EMAIL": "Email must be lowercase letters or digits at an allowed domain (e.g. name@gmail.com).",
        "INVALID_USERNAME": "Username may contain only lowercase letters and digits (max 50 characters).",
        "WEAK_PASSWORD": (
            "Password must be 8 to "
            f"{PASSWORD_MAX_LENGTH} characters and include an uppercase letter, "
            f"a lowercase letter, a digit and one of {PASSWORD_SYMBOLS}."
        ),
        "PASSWORD_MISMATCH": "new_password and confirm_password do not match.",
        "EMPTY_UPDATE": "Provide at least one field to update.",
        "INVALID_IDENTIFIER": "Provide a valid username or email address.",
    }
    return _messages.get(code, "Invalid input.")
