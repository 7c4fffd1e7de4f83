# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for credential checks and password hashing.

Users live in the users collection with bcrypt password hashes. Login
answers identically for an unknown email and a wrong password, and spends
a comparable amount of time on both.
"""

import bcrypt
from typing import Optional
from opentelemetry import trace
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError
import logging

from ..middleware.error_handler import InvalidCredentials, StoreError, ValidationException
from ..models.entities import SessionUser, User
from .mongodb import USERS, MongoDBService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthService:
    """Credential verification against stored users."""

    def __init__(self, mongodb: MongoDBService, bcrypt_rounds: int = 12):
        """
        Initialize the authentication service.

        Args:
            mongodb: MongoDB service holding the users collection
            bcrypt_rounds: bcrypt cost factor for new hashes
        """
        self.mongodb = mongodb
        self.bcrypt_rounds = bcrypt_rounds
        self._dummy_hash: Optional[str] = None

    @property
    def users(self):
        return self.mongodb.get_collection(USERS)

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt with salt.

        Args:
            password: Plain text password to hash

        Returns:
            Hashed password string
        """
        with tracer.start_as_current_span("auth.hash_password") as span:
            span.set_attribute("auth.operation", "hash_password")

            salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
            hashed = bcrypt.hashpw(password.encode('utf-8'), salt)

            logger.debug("Password hashed successfully")
            return hashed.decode('utf-8')

    def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            password: Plain text password to verify
            hashed_password: Stored hashed password

        Returns:
            True if password matches, False otherwise
        """
        with tracer.start_as_current_span("auth.verify_password") as span:
            span.set_attribute("auth.operation", "verify_password")

            try:
                result = bcrypt.checkpw(
                    password.encode('utf-8'),
                    hashed_password.encode('utf-8')
                )
            except ValueError as e:
                # Malformed stored hash
                span.set_attribute("auth.verification_result", "error")
                logger.error(f"Password verification error: {str(e)}")
                return False

            span.set_attribute("auth.verification_result", "success" if result else "failed")
            return result

    def _burn_password_check(self, password: str) -> None:
        if self._dummy_hash is None:
            self._dummy_hash = self.hash_password("statusboard-dummy-password")
        self.verify_password(password, self._dummy_hash)

    def find_user_by_email(self, email: str) -> Optional[User]:
        """Look up a user by (case-insensitive) email."""
        try:
            document = self.users.find_one({"email": email.strip().lower()})
        except PyMongoError as e:
            logger.error(f"Failed to look up user: {e}")
            raise StoreError("Failed to access user store") from e

        if document is None:
            return None
        try:
            return User.from_document(document)
        except (KeyError, ValidationError) as e:
            logger.error(f"Malformed user document: {e}", extra={"user_email": email})
            return None

    def login(self, email: str, password: str) -> SessionUser:
        """
        Check credentials.

        Returns:
            Identity to store in the session

        Raises:
            InvalidCredentials: For an unknown email or a wrong password alike
        """
        with tracer.start_as_current_span("auth.login") as span:
            user = self.find_user_by_email(email)

            if user is None:
                self._burn_password_check(password)
                span.set_attribute("auth.result", "failed")
                logger.warning("Login failed", extra={"reason": "unknown_user"})
                raise InvalidCredentials()

            if not self.verify_password(password, user.password_hash):
                span.set_attribute("auth.result", "failed")
                logger.warning("Login failed", extra={"reason": "bad_password", "user_id": user.uid})
                raise InvalidCredentials()

            span.set_attributes({"auth.result": "success", "user.id": user.uid})
            logger.info("User logged in", extra={"user_id": user.uid})
            return user.to_session_user()

    def create_user(self, email: str, username: str, password: str, is_admin: bool = False) -> User:
        """
        Store a new user account.

        Raises:
            ValidationException: If the email is taken or the data is invalid
        """
        try:
            user = User(
                email=email,
                username=username,
                password_hash=self.hash_password(password),
                is_admin=is_admin
            )
        except ValidationError as e:
            raise ValidationException.from_pydantic(e, "Invalid user data") from e

        try:
            self.users.insert_one(user.to_document())
        except DuplicateKeyError as e:
            raise ValidationException(f"User with email {user.email} already exists") from e
        except PyMongoError as e:
            logger.error(f"Failed to create user: {e}")
            raise StoreError("Failed to access user store") from e

        logger.info("User created", extra={"user_id": user.uid, "is_admin": is_admin})
        return user
