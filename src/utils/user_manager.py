"""User management utilities.

This module provides user storage, password hashing, and credential checks
for signup and login.
"""

import logging
from typing import Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import SUPPORTED_ROLES
from core.exceptions import (
    UnauthorizedError,
    UserAlreadyExistsError,
    ValidationError,
)
from models.user import UserModel
from schemas.user import User
from utils.converters import model_to_user, user_to_model

logger = logging.getLogger(__name__)

# Use bcrypt directly instead of passlib to avoid initialization issues
# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12

# bcrypt ignores everything past 72 bytes, so longer passwords are refused
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")


class UserManager:
    """Manages user data persistence and authentication using SQLAlchemy."""

    def __init__(self, db: Session, bcrypt_rounds: int = BCRYPT_ROUNDS):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            bcrypt_rounds: Cost factor used when hashing new passwords.
        """
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        password_bytes = _password_bytes(plain_password)
        if len(password_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(
                password_bytes, hashed_password.encode("utf-8")
            )
        except ValueError as e:
            # Malformed hash in the users table
            logger.error("Password verification error: %s", e)
            return False

    def create_user(self, username: str, password: str, role: str) -> User:
        """Create a new user.

        Args:
            username: Username for the new user.
            password: Plain text password.
            role: User role ('customer' or 'dealer').

        Returns:
            Created User object.

        Raises:
            ValidationError: If a field is empty, the password is too long,
                or the role is unknown.
            UserAlreadyExistsError: If username already exists.
        """
        if not (username or "").strip() or not password or not role:
            raise ValidationError("All fields are required.")
        if len(_password_bytes(password)) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes."
            )
        if role not in SUPPORTED_ROLES:
            raise ValidationError(
                f"Invalid role: {role}. Must be 'customer' or 'dealer'."
            )

        if self.get_user_by_username(username) is not None:
            raise UserAlreadyExistsError(username)

        user = User(
            username=username,
            password_hash=self.hash_password(password),
            role=role,
        )

        # Two concurrent signups can both pass the check above;
        # the unique constraint on username decides the winner.
        try:
            self.db.add(user_to_model(user))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise UserAlreadyExistsError(username) from e

        logger.info("Created user: %s (%s)", username, role)
        return user

    def get_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by username.

        Args:
            username: Username to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self.db.query(UserModel).filter(UserModel.username == username).first()
        if model:
            return model_to_user(model)
        return None

    def authenticate(self, username: str, password: str) -> User:
        """Check a username and password pair.

        Args:
            username: Username to log in as.
            password: Plain text password.

        Returns:
            The matching User.

        Raises:
            ValidationError: If either field is empty.
            UnauthorizedError: If the user does not exist or the password is wrong.
        """
        if not username or not password:
            raise ValidationError("Enter username and password")

        user = self.get_user_by_username(username)
        if user is None or not self.verify_password(password, user.password_hash):
            logger.info("Failed login for user: %s", username)
            raise UnauthorizedError("Invalid username or password")
        return user
