"""
Application error hierarchy and Flask error handlers.

AppError is the base for all typed errors. The global error handler
converts AppError subclasses to consistent JSON responses.

Captcha errors separate "the service said no" (CaptchaFailedError) from
"the service could not be asked" (CaptchaTransportError, CaptchaResponseError).
"""

from __future__ import annotations

from typing import Any, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class CaptchaError(AppError):
    error_code = "captcha_error"


class CaptchaFailedError(CaptchaError):
    status_code = 400
    error_code = "captcha_failed"


class CaptchaTransportError(CaptchaError):
    status_code = 503
    error_code = "captcha_unavailable"


class CaptchaResponseError(CaptchaError):
    status_code = 502
    error_code = "captcha_bad_response"


def register_error_handlers(app: Flask) -> None:
    """Register global error handlers on the Flask app."""

    @app.errorhandler(AppError)
    def app_error_handler(exc: AppError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(Exception)
    def unhandled_exception_handler(exc: Exception):
        # werkzeug's own 404/405/etc. keep their normal responses
        if isinstance(exc, HTTPException):
            return exc
        return (
            jsonify(
                {"error": "An internal server error occurred.", "code": "internal_error"}
            ),
            500,
        )
