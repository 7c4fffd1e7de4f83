# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with structured problem-details responses.
Provides centralized error handling and formatting for Flask applications.
"""

import json
import logging
import traceback
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, jsonify, make_response, request
from opentelemetry import trace
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

PROBLEM_BASE_URL = "https://statusboard.invalid/problems"

HTTP_ERROR_TYPES = {
    400: ("bad-request", "Bad Request"),
    401: ("authentication-required", "Authentication Required"),
    403: ("insufficient-permissions", "Insufficient Permissions"),
    404: ("resource-not-found", "Resource Not Found"),
    405: ("method-not-allowed", "Method Not Allowed"),
    409: ("resource-conflict", "Resource Conflict"),
    415: ("unsupported-media-type", "Unsupported Media Type"),
    422: ("validation-error", "Validation Error"),
    500: ("internal-server-error", "Internal Server Error"),
    503: ("service-unavailable", "Service Unavailable"),
}

ERROR_TITLES = {
    "validation-error": "Validation Error",
    "authentication-required": "Authentication Required",
    "invalid-credentials": "Invalid Credentials",
    "insufficient-permissions": "Insufficient Permissions",
    "store-error": "Store Error",
}


def build_error_response(
    error_type: str,
    title: str,
    status: int,
    detail: str,
    instance: str,
    validation_errors: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """
    Build an RFC 7807 style error body.

    The legacy success/error keys are kept so older clients that only look
    at those keep working.
    """
    error_response = {
        'success': False,
        'error': detail,
        'type': f"{PROBLEM_BASE_URL}/{error_type}",
        'title': title,
        'status': status,
        'detail': detail,
        'instance': instance
    }

    if validation_errors:
        error_response['errors'] = validation_errors

    return error_response


def format_validation_errors(error: ValidationError) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into field/message pairs."""
    formatted = []
    for item in json.loads(error.json()):
        formatted.append({
            'field': ".".join(str(part) for part in item.get('loc', ())),
            'message': item.get('msg', 'Invalid value'),
            'type': item.get('type', 'value_error')
        })
    return formatted


class CustomException(Exception):
    """Base class for custom application exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for validation errors."""

    def __init__(self, message: str, validation_errors: list = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []

    @classmethod
    def from_pydantic(cls, error: ValidationError, message: str = "Invalid request data"):
        return cls(message, format_validation_errors(error))


class AuthenticationException(CustomException):
    """Exception for authentication errors."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, 401, "authentication-required")


class InvalidCredentials(AuthenticationException):
    """Login rejected. The message never reveals which part was wrong."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)
        self.error_type = "invalid-credentials"


class AuthorizationException(CustomException):
    """Exception for authorization errors."""

    def __init__(self, message: str = "Administrator privileges required"):
        super().__init__(message, 403, "insufficient-permissions")


class StoreError(CustomException):
    """Backing store failure. The message is safe to show to clients."""

    def __init__(self, message: str = "Failed to access the data store"):
        super().__init__(message, 500, "store-error")


class ErrorHandlerMiddleware:
    """Centralized error handling middleware."""

    def __init__(self, app: Flask):
        self.app = app
        self.register_error_handlers()

    def register_error_handlers(self):
        """Register error handlers with Flask application."""

        @self.app.errorhandler(CustomException)
        def handle_custom_exception(error: CustomException):
            return self.handle_custom_error(error)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error: HTTPException):
            if error.code is not None and error.code >= 500:
                return self.handle_server_error(error)
            return self.handle_client_error(error)

        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            return self.handle_unexpected_error(error)

    def handle_custom_error(self, error: CustomException):
        """Handle application exceptions raised by services and routes."""
        with tracer.start_as_current_span("error_handler.custom_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            log = logger.error if error.status_code >= 500 else logger.warning
            log(
                f"Custom exception: {error.error_type}",
                extra={
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "error_message": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )

            error_response = build_error_response(
                error.error_type,
                ERROR_TITLES.get(error.error_type, "Application Error"),
                error.status_code,
                error.message,
                request.path,
                getattr(error, "validation_errors", None)
            )
            return jsonify(error_response), error.status_code

    def handle_client_error(self, error: HTTPException) -> Tuple[Any, int]:
        """Handle werkzeug client errors (4xx status codes)."""
        error_type, title = HTTP_ERROR_TYPES.get(error.code, ("client-error", error.name))

        with tracer.start_as_current_span("error_handler.client_error") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })

            detail = str(error.description) if error.description else title

            logger.warning(
                f"Client error: {title}",
                extra={
                    "error_type": error_type,
                    "status_code": error.code,
                    "detail": detail,
                    "path": request.path,
                    "method": request.method,
                    "user_agent": request.headers.get('User-Agent'),
                    "ip_address": request.remote_addr
                }
            )

            error_response = build_error_response(error_type, title, error.code, detail, request.path)
            return jsonify(error_response), error.code

    def handle_server_error(self, error: HTTPException) -> Tuple[Any, int]:
        """Handle werkzeug server errors (5xx status codes)."""
        error_type, title = HTTP_ERROR_TYPES.get(error.code, ("server-error", error.name))

        with tracer.start_as_current_span("error_handler.server_error") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })

            logger.error(
                f"Server error: {title}",
                extra={
                    "error_type": error_type,
                    "status_code": error.code,
                    "path": request.path,
                    "method": request.method
                }
            )

            detail = title
            if self.app.config.get('ENVIRONMENT') != 'production' and error.description:
                detail = str(error.description)

            error_response = build_error_response(error_type, title, error.code, detail, request.path)
            return jsonify(error_response), error.code

    def handle_unexpected_error(self, error: Exception) -> Tuple[Any, int]:
        """Handle exceptions not caught by any specific handler."""
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_type": "unexpected-error",
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method,
                    "traceback": traceback.format_exc()
                },
                exc_info=True
            )

            # Don't expose internal error details
            detail = "An unexpected error occurred"
            if self.app.config.get('ENVIRONMENT') != 'production':
                detail = f"{error.__class__.__name__}: {str(error)}"

            error_response = build_error_response(
                "internal-server-error", "Internal Server Error", 500, detail, request.path
            )
            return jsonify(error_response), 500


def validation_error_callback(error: ValidationError):
    """Turn flask-openapi3 request validation failures into 400 problem bodies."""
    logger.warning(
        "Request validation failed",
        extra={"path": request.path, "method": request.method, "error_count": error.error_count()}
    )
    error_response = build_error_response(
        "validation-error",
        ERROR_TITLES["validation-error"],
        400,
        "Invalid request data",
        request.path,
        format_validation_errors(error)
    )
    return make_response(jsonify(error_response), 400)
