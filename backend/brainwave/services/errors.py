"""
Error types raised by the forum managers.

Every error carries an ErrorKind so callers can branch on the category
without inspecting message text. The HTTP layer maps kinds to status codes.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories."""
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    INCONSISTENT = "inconsistent"


class ServiceError(Exception):
    """Base exception for manager errors."""
    kind: ErrorKind = ErrorKind.INCONSISTENT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class DuplicateError(ServiceError):
    kind = ErrorKind.DUPLICATE


class InvalidInputError(ServiceError):
    kind = ErrorKind.INVALID_INPUT


class UnauthorizedError(ServiceError):
    kind = ErrorKind.UNAUTHORIZED


class InconsistentStateError(ServiceError):
    """A composite write failed part way and was rolled back."""
    kind = ErrorKind.INCONSISTENT


class UserNotFoundError(NotFoundError):
    def __init__(self, username: str):
        super().__init__(f"User '{username}' not found")
        self.username = username


class TopicNotFoundError(NotFoundError):
    def __init__(self, topic):
        super().__init__(f"Topic '{topic}' not found")
        self.topic = topic


class MessageNotFoundError(NotFoundError):
    def __init__(self, message_id: int, role: str = "message"):
        super().__init__(f"{role.capitalize()} message with ID {message_id} not found")
        self.message_id = message_id
        self.role = role


class DuplicateIdentityError(DuplicateError):
    def __init__(self):
        super().__init__("Username or email already exists")


class UsernameInUseError(DuplicateError):
    def __init__(self, username: str):
        super().__init__(f"Username '{username}' is already in use")
        self.username = username


class EmailInUseError(DuplicateError):
    def __init__(self, email: str):
        super().__init__("Email is already in use")
        self.email = email


class DuplicateTitleError(DuplicateError):
    def __init__(self, title: str):
        super().__init__(f"Topic title '{title}' already exists")
        self.title = title


class InvalidUsernameError(InvalidInputError):
    pass


class CrossTopicMismatchError(InvalidInputError):
    def __init__(self, parent_id: int, child_id: int):
        super().__init__(
            f"Messages are not in the same topic: parent_id={parent_id}, child_id={child_id}"
        )
        self.parent_id = parent_id
        self.child_id = child_id


class CycleDetectedError(InvalidInputError):
    def __init__(self, parent_id: int, child_id: int):
        super().__init__(
            f"Message {child_id} cannot be placed under {parent_id}: it would become its own ancestor"
        )
        self.parent_id = parent_id
        self.child_id = child_id


class InvalidResetCodeError(InvalidInputError):
    def __init__(self):
        super().__init__("Invalid reset code")


class WrongPasswordError(UnauthorizedError):
    def __init__(self):
        super().__init__("Incorrect current password")
