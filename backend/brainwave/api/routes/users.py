"""
User API endpoints for account management.

Provides registration, credential checks and changes, the password reset
flow, and user removal.

Handlers that hash or check passwords are plain functions so that FastAPI
runs them in its threadpool instead of on the event loop.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from brainwave.database import get_db
from brainwave.services.user_service import UserManager


router = APIRouter(prefix="/users", tags=["users"])


def get_user_manager(db: Session = Depends(get_db)) -> UserManager:
    """Build a UserManager bound to the request's session."""
    return UserManager(db)


# Request/Response models
class RegisterUserRequest(BaseModel):
    """Request model for user registration."""
    username: str = Field(..., min_length=1, description="Username (3-20 characters)")
    email: str = Field(..., min_length=1, description="Email address")
    password: str = Field(..., min_length=1, description="Password")


class VerifyCredentialsRequest(BaseModel):
    """Request model for credential verification."""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class VerifyCredentialsResponse(BaseModel):
    """Response model for credential verification."""
    valid: bool
    error: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """Request model for changing a password."""
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class ChangeEmailRequest(BaseModel):
    """Request model for changing an email."""
    email: str = Field(..., min_length=1)


class ChangeUsernameRequest(BaseModel):
    """Request model for renaming a user."""
    new_username: str = Field(..., min_length=1)


class ResetCodeRequest(BaseModel):
    """Request model for issuing a password reset code."""
    email: str = Field(..., min_length=1)


class ResetCodeResponse(BaseModel):
    """Response model carrying a freshly issued reset code."""
    reset_code: str


class ResetPasswordRequest(BaseModel):
    """Request model for redeeming a reset code."""
    email: str = Field(..., min_length=1)
    reset_code: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class StatusResponse(BaseModel):
    """Plain confirmation message."""
    message: str


class UserResponse(BaseModel):
    """Response model for user data (never includes the password hash)."""
    id: int
    username: str
    email: str
    topics_opened: int
    messages_sent: int
    created_at: datetime

    class Config:
        from_attributes = True


@router.get("", response_model=List[UserResponse])
async def list_users(users: UserManager = Depends(get_user_manager)):
    """
    List all users.

    Returns:
        List of all users
    """
    return users.list_all()


@router.post("", response_model=UserResponse, status_code=201)
def register_user(
    request: RegisterUserRequest,
    users: UserManager = Depends(get_user_manager)
):
    """
    Register a new user.

    Raises:
        400: Invalid username, email or password
        409: Username or email already exists
    """
    return users.register(request.username, request.email, request.password)


@router.post("/verify", response_model=VerifyCredentialsResponse)
def verify_credentials(
    request: VerifyCredentialsRequest,
    users: UserManager = Depends(get_user_manager)
):
    """
    Check a username/password pair.

    Unknown users and wrong passwords both answer valid=false.
    """
    valid = users.verify_credentials(request.username, request.password)
    if not valid:
        return VerifyCredentialsResponse(valid=False, error="Invalid username or password")

    return VerifyCredentialsResponse(valid=True)


@router.post("/password-reset", response_model=ResetCodeResponse)
async def issue_reset_code(
    request: ResetCodeRequest,
    users: UserManager = Depends(get_user_manager)
):
    """
    Issue a password reset code for the account with this email.

    Raises:
        404: Email not found
    """
    reset_code = users.issue_password_reset_code(request.email)
    return ResetCodeResponse(reset_code=reset_code)


@router.post("/password-reset/confirm", response_model=StatusResponse)
def reset_password(
    request: ResetPasswordRequest,
    users: UserManager = Depends(get_user_manager)
):
    """
    Set a new password using a reset code.

    Raises:
        400: Invalid reset code or password
    """
    users.reset_password(request.email, request.reset_code, request.new_password)
    return StatusResponse(message="Password reset successfully")


@router.get("/{username}", response_model=UserResponse)
async def get_user(
    username: str,
    users: UserManager = Depends(get_user_manager)
):
    """
    Get user by username.

    Raises:
        404: User not found
    """
    return users.get(username)


@router.put("/{username}/password", response_model=StatusResponse)
def change_password(
    username: str,
    request: ChangePasswordRequest,
    users: UserManager = Depends(get_user_manager)
):
    """
    Change a user's password.

    Raises:
        401: Current password is incorrect
        404: User not found
    """
    users.change_password(username, request.current_password, request.new_password)
    return StatusResponse(message="Password changed successfully")


@router.put("/{username}/email", response_model=UserResponse)
async def change_email(
    username: str,
    request: ChangeEmailRequest,
    users: UserManager = Depends(get_user_manager)
):
    """
    Change a user's email.

    Raises:
        404: User not found
        409: Email already in use
    """
    return users.change_email(username, request.email)


@router.put("/{username}/username", response_model=UserResponse)
async def change_username(
    username: str,
    request: ChangeUsernameRequest,
    users: UserManager = Depends(get_user_manager)
):
    """
    Rename a user.

    Raises:
        400: Invalid username format
        404: User not found
        409: Username already in use
    """
    return users.change_username(username, request.new_username)


@router.delete("/{username}", status_code=204)
async def delete_user(
    username: str,
    users: UserManager = Depends(get_user_manager)
):
    """
    Delete a user, keeping their topics and messages without an author.

    Returns:
        No content (204)

    Raises:
        404: User not found
    """
    users.remove(username)
    return None
