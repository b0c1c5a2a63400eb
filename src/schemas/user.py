"""User schema definitions.

This module defines the User model, the logged-in Identity, and the request
and response bodies of the authentication endpoints.
"""

import uuid
from datetime import datetime
from typing import Optional

import pytz
from pydantic import BaseModel, Field


class User(BaseModel):
    user_id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: str(uuid.uuid4()),
        frozen=True,
    )
    username: str = Field(description="Unique login name.")
    password_hash: str = Field(description="Bcrypt hash of the password.")
    role: str = Field(description="Either 'customer' or 'dealer'.")
    create_at: str = Field(
        description="The time when the user signed up.",
        default_factory=lambda: datetime.now(pytz.utc).isoformat(),
    )


class Identity(BaseModel):
    """Who is behind the current request.

    An identity with no username is the anonymous caller.
    """

    username: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.username is None


ANONYMOUS = Identity()


class SignupRequest(BaseModel):
    username: str
    password: str
    role: str


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    success: bool = True
    username: str
    role: str
    token: str = Field(
        description="Session token; also set as an HTTP-only cookie."
    )


class CurrentUserResponse(BaseModel):
    success: bool
    username: Optional[str] = None
    role: Optional[str] = None
    message: Optional[str] = None
