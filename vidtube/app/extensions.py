"""
extensions.py: Flask extension singletons.

Initialises SQLAlchemy and marshmallow as module-level objects so they can be
imported anywhere without creating circular dependencies.

Pattern:
    1. Create the extension object here (no app attached yet).
    2. Call init_app(app) inside the app factory in app/__init__.py.
    3. Import `db` or `ma` from here wherever needed.

The PasswordHasher and TokenIssuer are not Flask extensions: the factory
builds them once from app.config and stores them in app.extensions. Routes
fetch them with the two accessors below and hand them to services as plain
arguments, so services never read configuration themselves.
"""

from flask import current_app
from flask_marshmallow import Marshmallow
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# IMPORTANT: schema inheritance rule:
#   Validation Schema classes (in app/schemas/) inherit from marshmallow.Schema
#   directly, NOT from ma.Schema. ma.Schema requires an active Flask application
#   context, and the schema unit tests run without one.
ma = Marshmallow()

TOKEN_ISSUER_KEY = "vidtube.token_issuer"
PASSWORD_HASHER_KEY = "vidtube.password_hasher"


def get_token_issuer():
    """Returns the TokenIssuer built by create_app()."""
    return current_app.extensions[TOKEN_ISSUER_KEY]


def get_password_hasher():
    """Returns the PasswordHasher built by create_app()."""
    return current_app.extensions[PASSWORD_HASHER_KEY]
