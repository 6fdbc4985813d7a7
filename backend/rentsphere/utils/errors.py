from flask import jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError as SchemaValidationError


class ApiError(Exception):
    """
    Base exception for business errors.
    """
    code = "API_ERROR"

    def __init__(self, message, status_code=400, errors=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}
        self.payload = dict(payload or {})
        self.payload.setdefault("code", self.code)


class ValidationError(ApiError):
    code = "VALIDATION_ERROR"

    def __init__(self, message, errors=None, payload=None):
        super().__init__(message, 400, errors=errors, payload=payload)


class Forbidden(ApiError):
    code = "FORBIDDEN"

    def __init__(self, message="Not authorized", payload=None):
        super().__init__(message, 403, payload=payload)


class NotFound(ApiError):
    code = "NOT_FOUND"

    def __init__(self, message="Not found", payload=None):
        super().__init__(message, 404, payload=payload)


class InvalidTransition(ApiError):
    """The lifecycle guard rejected the action; carries the current state."""

    code = "INVALID_TRANSITION"

    def __init__(self, message, current_state=None, payload=None):
        payload = dict(payload or {})
        payload["current_state"] = current_state
        super().__init__(message, 409, payload=payload)
        self.current_state = current_state


class Conflict(ApiError):
    code = "CONFLICT"

    def __init__(self, message, payload=None):
        super().__init__(message, 409, payload=payload)


class AlreadyRated(Conflict):
    code = "ALREADY_RATED"


class UpstreamFailure(ApiError):
    code = "UPSTREAM_FAILURE"

    def __init__(self, message, payload=None):
        payload = dict(payload or {})
        payload.setdefault("retry", "Please try again in a few minutes.")
        super().__init__(message, 502, payload=payload)


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        response = {
            "success": False,
            "message": err.message,
        }
        if err.errors:
            response["errors"] = err.errors
        if getattr(err, "payload", None):
            response["payload"] = err.payload

        return jsonify(response), err.status_code

    @app.errorhandler(SchemaValidationError)
    def handle_marshmallow_validation(err: SchemaValidationError):
        response = {
            "success": False,
            "message": "Invalid data",
            "errors": err.messages if hasattr(err, "messages") else str(err),
            "payload": {"code": ValidationError.code},
        }
        return jsonify(response), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        response = {
            "success": False,
            "message": err.description or "HTTP error",
        }
        return jsonify(response), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        app.logger.exception(err)

        response = {
            "success": False,
            "message": "Internal server error",
        }
        return jsonify(response), 500
