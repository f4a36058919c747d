"""
User service layer for user management operations.

Handles registration, credential checks and changes, the password reset
flow, and user removal with reference cleanup.
"""

import re
import logging
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from brainwave.config import get_settings
from brainwave.core.passwords import hash_password, check_password
from brainwave.core.reset_code import generate_reset_code, is_valid_reset_code
from brainwave.database import transaction
from brainwave.models.message import Message
from brainwave.models.topic import Topic
from brainwave.models.user import User
from brainwave.services.errors import (
    DuplicateIdentityError,
    EmailInUseError,
    InconsistentStateError,
    InvalidInputError,
    InvalidResetCodeError,
    InvalidUsernameError,
    UserNotFoundError,
    UsernameInUseError,
    WrongPasswordError,
)


logger = logging.getLogger(__name__)
settings = get_settings()

# Username validation regex: 3-20 characters, alphanumeric + underscore
USERNAME_PATTERN = re.compile(settings.forum.USERNAME_PATTERN)

# bcrypt ignores (or rejects) anything past this many bytes
MAX_PASSWORD_BYTES = 72


def validate_username(username: str) -> tuple[bool, Optional[str]]:
    """
    Validate username format.

    Args:
        username: Username to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not username:
        return False, "Username is required"

    if len(username) < settings.forum.USERNAME_MIN_LENGTH:
        return False, f"Username must be at least {settings.forum.USERNAME_MIN_LENGTH} characters"

    if len(username) > settings.forum.USERNAME_MAX_LENGTH:
        return False, f"Username must not exceed {settings.forum.USERNAME_MAX_LENGTH} characters"

    if not USERNAME_PATTERN.fullmatch(username):
        return False, "Username can only contain letters, numbers, and underscores"

    return True, None


def validate_password(password: str) -> tuple[bool, Optional[str]]:
    """
    Validate password length.

    Args:
        password: Password to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password:
        return False, "Password is required"

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False, f"Password must not exceed {MAX_PASSWORD_BYTES} bytes"

    return True, None


class UserManager:
    """
    Manages user accounts.

    Responsibilities:
    - Register users with hashed passwords
    - Verify and change credentials
    - Issue and redeem password reset codes
    - Remove users, orphaning their topics and messages
    """

    def __init__(self, db: Session):
        """
        Initialize UserManager.

        Args:
            db: Database session all operations run against
        """
        self.db = db

    def register(self, username: str, email: str, password: str) -> User:
        """
        Register a new user.

        Args:
            username: Unique username
            email: Email address, must not belong to another user
            password: Plain text password, stored only as a bcrypt hash

        Returns:
            Created User object

        Raises:
            InvalidUsernameError: If the username format is invalid
            InvalidInputError: If email or password is missing or invalid
            DuplicateIdentityError: If the username or email already exists
        """
        is_valid, error_message = validate_username(username)
        if not is_valid:
            raise InvalidUsernameError(error_message)

        if not email or not email.strip():
            raise InvalidInputError("Email is required")

        is_valid, error_message = validate_password(password)
        if not is_valid:
            raise InvalidInputError(error_message)

        existing_user = self.db.query(User).filter(
            (User.username == username) | (User.email == email)
        ).first()
        if existing_user:
            logger.warning(f"Registration rejected, username or email taken: {username}")
            raise DuplicateIdentityError()

        new_user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
        )

        try:
            with transaction(self.db):
                self.db.add(new_user)
        except IntegrityError:
            # Lost a race against a concurrent registration
            logger.warning(f"Unique constraint violation registering {username}")
            raise DuplicateIdentityError()

        self.db.refresh(new_user)
        logger.info(f"User added successfully: {username}")

        return new_user

    def get(self, username: str) -> User:
        """
        Get user by username.

        Raises:
            UserNotFoundError: If no user has this username
        """
        user = self.db.query(User).filter(User.username == username).first()
        if not user:
            raise UserNotFoundError(username)

        return user

    def find_by_email(self, email: str) -> Optional[User]:
        """Get user by email, or None."""
        return self.db.query(User).filter(User.email == email).first()

    def list_all(self) -> List[User]:
        """
        Get all users, ordered by registration.

        Returns:
            List of all User objects
        """
        return self.db.query(User).order_by(User.id).all()

    def verify_credentials(self, username: str, password: str) -> bool:
        """
        Check a username/password pair.

        Unknown usernames and wrong passwords both return False so callers
        cannot tell the two apart.

        Returns:
            True only if the user exists and the password matches
        """
        user = self.db.query(User).filter(User.username == username).first()
        if not user:
            logger.info(f"Credential check for unknown user: {username}")
            return False

        if not password or not check_password(password, user.password_hash):
            logger.info(f"Incorrect password for user {username}")
            return False

        return True

    def change_password(self, username: str, current_password: str, new_password: str) -> User:
        """
        Change a user's password after re-verifying the current one.

        Raises:
            UserNotFoundError: If the user does not exist
            WrongPasswordError: If current_password does not match
            InvalidInputError: If new_password is invalid
        """
        user = self.get(username)

        if not current_password or not check_password(current_password, user.password_hash):
            logger.warning(f"Incorrect current password for user {username}")
            raise WrongPasswordError()

        is_valid, error_message = validate_password(new_password)
        if not is_valid:
            raise InvalidInputError(error_message)

        with transaction(self.db):
            user.password_hash = hash_password(new_password)

        logger.info(f"Password changed successfully for user: {username}")
        return user

    def change_email(self, username: str, new_email: str) -> User:
        """
        Change a user's email.

        Any existing owner of new_email, including the user itself, is a
        conflict.

        Raises:
            InvalidInputError: If new_email is empty
            EmailInUseError: If new_email already belongs to a user
            UserNotFoundError: If the user does not exist
        """
        if not new_email or not new_email.strip():
            raise InvalidInputError("Email is required")

        if self.find_by_email(new_email):
            logger.warning(f"Email already in use: {new_email}")
            raise EmailInUseError(new_email)

        user = self.get(username)

        with transaction(self.db):
            user.email = new_email

        logger.info(f"Email updated successfully for user: {username}")
        return user

    def change_username(self, username: str, new_username: str) -> User:
        """
        Rename a user.

        Raises:
            InvalidUsernameError: If new_username violates the format rule
            UsernameInUseError: If new_username is taken, including by this user
            UserNotFoundError: If the user does not exist
        """
        is_valid, error_message = validate_username(new_username)
        if not is_valid:
            logger.warning(f"Invalid username format: {new_username}")
            raise InvalidUsernameError(error_message)

        if self.db.query(User).filter(User.username == new_username).first():
            logger.warning(f"Username already in use: {new_username}")
            raise UsernameInUseError(new_username)

        user = self.get(username)

        try:
            with transaction(self.db):
                user.username = new_username
        except IntegrityError:
            raise UsernameInUseError(new_username)

        logger.info(f"Username updated successfully from {username} to {new_username}")
        return user

    def remove(self, username: str) -> None:
        """
        Delete a user.

        Topics and messages created by the user are kept; their creator and
        author references are set to NULL before the user row is deleted.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = self.get(username)
        user_id = user.id

        try:
            with transaction(self.db):
                self.db.query(Topic).filter(Topic.creator_id == user_id).update(
                    {Topic.creator_id: None}, synchronize_session=False
                )
                self.db.query(Message).filter(Message.user_id == user_id).update(
                    {Message.user_id: None}, synchronize_session=False
                )
                self.db.delete(user)
        except SQLAlchemyError as e:
            logger.error(f"Failed to remove user {username}: {str(e)}")
            raise InconsistentStateError(f"Could not remove user '{username}'") from e

        logger.info(f"User removed successfully: {username}")

    def issue_password_reset_code(self, email: str) -> str:
        """
        Generate and store a password reset code for the user with this email.

        Any previously issued code is overwritten.

        Returns:
            The 6-digit reset code

        Raises:
            UserNotFoundError: If no user has this email
        """
        user = self.find_by_email(email)
        if not user:
            logger.warning(f"Reset code requested for unknown email: {email}")
            raise UserNotFoundError(email)

        reset_code = generate_reset_code()
        with transaction(self.db):
            user.reset_code = reset_code

        logger.info(f"Password reset code issued for user ID {user.id}")
        return reset_code

    def reset_password(self, email: str, reset_code: str, new_password: str) -> User:
        """
        Set a new password using a reset code.

        The user is looked up by reset code alone, so the code is the
        bearer credential of this flow. email is accepted for the request
        shape but not used to narrow the lookup.

        Raises:
            InvalidResetCodeError: If no user holds this code
            InvalidInputError: If new_password is invalid
        """
        if not is_valid_reset_code(reset_code):
            raise InvalidResetCodeError()

        user = self.db.query(User).filter(User.reset_code == reset_code).first()
        if not user:
            logger.warning(f"Invalid reset code submitted for {email}")
            raise InvalidResetCodeError()

        is_valid, error_message = validate_password(new_password)
        if not is_valid:
            raise InvalidInputError(error_message)

        try:
            with transaction(self.db):
                user.password_hash = hash_password(new_password)
                user.reset_code = None
        except SQLAlchemyError as e:
            logger.error(f"Failed to reset password for user ID {user.id}: {str(e)}")
            raise InconsistentStateError("Could not reset password") from e

        logger.info(f"Password reset for user ID {user.id}")
        return user
