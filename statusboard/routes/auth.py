# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Authentication endpoints for login, session check and logout.
"""

from flask import current_app, jsonify, make_response, request
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError
import logging

from ..middleware.auth import get_session_user, optional_session
from ..middleware.error_handler import ValidationException
from ..models.requests import LoginRequest
from ..models.responses import ErrorResponse, LoginResponse, SessionResponse, SuccessResponse

# Set up logging and tracing
logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# Create API blueprint
auth_tag = Tag(name="Authentication", description="Session login and logout")
auth_bp = APIBlueprint(
    'auth',
    __name__,
    url_prefix='/api/auth',
    abp_tags=[auth_tag]
)


def _set_session_cookie(response, token: str):
    response.set_cookie(
        current_app.auth_middleware.cookie_name,
        token,
        max_age=current_app.config['SESSION_TTL_SECONDS'],
        httponly=True,
        secure=current_app.config['SESSION_COOKIE_SECURE'],
        samesite='Lax',
        path='/'
    )


def _clear_session_cookie(response):
    response.delete_cookie(
        current_app.auth_middleware.cookie_name,
        path='/',
        httponly=True,
        secure=current_app.config['SESSION_COOKIE_SECURE'],
        samesite='Lax'
    )


@auth_bp.post('/login', responses={200: LoginResponse, 400: ErrorResponse, 401: ErrorResponse})
def login():
    """
    Authenticate a user and open a session.

    The session token is returned in an HttpOnly cookie; the body carries
    the user identity only.
    """
    with tracer.start_as_current_span(
        "auth.login_request",
        attributes={"operation": "login"}
    ) as span:
        request_data = request.get_json(silent=True)
        if not isinstance(request_data, dict):
            span.set_status(Status(StatusCode.ERROR, "Missing request body"))
            raise ValidationException("Missing request body")

        try:
            login_request = LoginRequest(**request_data)
        except ValidationError as e:
            span.set_status(Status(StatusCode.ERROR, "Validation failed"))
            logger.warning("Login request validation failed", extra={"ip_address": request.remote_addr})
            raise ValidationException.from_pydantic(e, "Email and password are required")

        user = current_app.auth_service.login(login_request.email, login_request.password)
        token = current_app.session_store.create(user)

        span.set_attribute("user.id", user.uid)

        response = make_response(jsonify(LoginResponse(user=user).model_dump(mode="json", by_alias=True)))
        _set_session_cookie(response, token)
        return response


@auth_bp.get('/session', responses={200: SessionResponse})
@optional_session
def check_session():
    """Report whether the request carries a valid session. Never an error."""
    user = get_session_user()
    body = SessionResponse(authenticated=user is not None, user=user)
    return jsonify(body.model_dump(mode="json", by_alias=True, exclude_none=True))


@auth_bp.post('/logout', responses={200: SuccessResponse})
def logout():
    """End the current session, if any, and clear the cookie."""
    token = current_app.auth_middleware.extract_token_from_request()
    if token:
        current_app.session_store.destroy(token)
        logger.info("Session ended")

    response = make_response(jsonify(SuccessResponse().model_dump()))
    _clear_session_cookie(response)
    return response
