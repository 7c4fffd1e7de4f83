# SPDX-License-Identifier: Apache-2.0

"""
Session authentication middleware.

Resolves the session token carried by a request (HttpOnly cookie or
Authorization bearer header) into the logged-in identity, and provides the
route decorators that gate writes behind a session or an admin session.
"""

from functools import wraps
from flask import current_app, g, request
from typing import Callable, Optional
from opentelemetry import trace
import logging

from ..models.entities import SessionUser
from .error_handler import AuthenticationException, AuthorizationException

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "statusboard_session"


class AuthMiddleware:
    """Maps request credentials to a SessionUser through the session store."""

    def __init__(self, session_store, cookie_name: str = SESSION_COOKIE_NAME):
        """
        Initialize the authentication middleware.

        Args:
            session_store: SessionStore resolving tokens
            cookie_name: Name of the session cookie
        """
        self.session_store = session_store
        self.cookie_name = cookie_name

    def extract_token_from_request(self) -> Optional[str]:
        """
        Extract the session token, cookie first.

        Returns:
            Token string or None if not found
        """
        token = request.cookies.get(self.cookie_name)
        if token:
            return token

        auth_header = request.headers.get('Authorization', '')
        if auth_header.startswith('Bearer '):
            return auth_header[7:].strip() or None

        return None

    def load_session_user(self) -> Optional[SessionUser]:
        """Resolve the current request to a session identity, cached on g."""
        if "session_user" in g:
            return g.session_user

        token = self.extract_token_from_request()
        user = self.session_store.get(token) if token else None
        g.session_token = token
        g.session_user = user
        return user


def _auth_middleware() -> AuthMiddleware:
    return current_app.auth_middleware


def optional_session(f: Callable) -> Callable:
    """Populate g.session_user when a valid session exists; never rejects."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _auth_middleware().load_session_user()
        return f(*args, **kwargs)

    return decorated_function


def require_session(f: Callable) -> Callable:
    """Reject requests without a valid session with 401."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        with tracer.start_as_current_span("auth.middleware.require_session") as span:
            user = _auth_middleware().load_session_user()
            if user is None:
                span.set_attribute("auth.result", "missing_session")
                logger.warning("Authentication failed: no valid session", extra={"path": request.path})
                raise AuthenticationException("Authentication required")

            span.set_attributes({"auth.result": "success", "user.id": user.uid})

        return f(*args, **kwargs)

    return decorated_function


def require_admin(f: Callable) -> Callable:
    """Reject anonymous requests with 401 and non-admin sessions with 403."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        with tracer.start_as_current_span("auth.middleware.require_admin") as span:
            user = _auth_middleware().load_session_user()
            if user is None:
                span.set_attribute("auth.result", "missing_session")
                logger.warning("Authentication failed: no valid session", extra={"path": request.path})
                raise AuthenticationException("Authentication required")

            if not user.is_admin:
                span.set_attribute("auth.result", "forbidden")
                logger.warning("Authorization failed: admin required", extra={
                    "path": request.path,
                    "user_id": user.uid
                })
                raise AuthorizationException("Administrator privileges required")

            span.set_attributes({"auth.result": "success", "user.id": user.uid})

        return f(*args, **kwargs)

    return decorated_function


def get_session_user() -> Optional[SessionUser]:
    """Identity resolved for the current request, if any."""
    return g.get("session_user")
