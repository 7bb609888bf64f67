from typing import Iterable, Optional

from flask import Flask, jsonify
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException


class CatalogError(Exception):
    """Base class for errors that are turned into JSON responses."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CatalogError):
    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None, fields: Iterable[str] = ()):
        super().__init__(message)
        self.fields = list(fields)


class NotFoundError(CatalogError):
    status_code = 404
    default_message = "Not found"


class AuthError(CatalogError):
    status_code = 403
    default_message = "Forbidden"
    reason = "forbidden"


class MissingTokenError(AuthError):
    reason = "missing"


class InvalidTokenError(AuthError):
    reason = "invalid"


class ExpiredTokenError(AuthError):
    reason = "expired"


class InvalidCredentialsError(CatalogError):
    status_code = 401
    default_message = "Invalid credentials"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(CatalogError)
    def handle_catalog_error(error: CatalogError):
        body = {"error": error.message}
        if isinstance(error, ValidationError) and error.fields:
            body["fields"] = error.fields
        return jsonify(body), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(PyMongoError)
    def handle_store_error(error: PyMongoError):
        app.logger.exception("Document store failure: %s", error)
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        app.logger.exception("Unhandled error: %s", error)
        return jsonify({"error": "Internal server error"}), 500
