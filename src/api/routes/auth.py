"""Authentication routes.

This module handles HTTP endpoints for signup, login, logout, and the
current user, plus the dependencies other routes use to identify and
authorize the caller.
"""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import (
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SECURE,
    SESSION_IDLE_TIMEOUT_SECONDS,
)
from core.dependencies import SessionManagerDep, UserManagerDep
from core.exceptions import (
    ForbiddenError,
    UnauthorizedError,
    UserAlreadyExistsError,
    ValidationError,
)
from schemas.user import (
    CurrentUserResponse,
    Identity,
    LoginRequest,
    LoginResponse,
    SignupRequest,
)
from utils.session_manager import authorize

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])

# Bearer tokens are optional; browsers send the session cookie instead
security = HTTPBearer(auto_error=False)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Read the session token from the Authorization header or the cookie.

    Args:
        request: Incoming request.
        credentials: Bearer credentials, if the header was sent.

    Returns:
        The raw token, or None if the client sent neither.
    """
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE_NAME)


def set_session_cookie(response: Response, token: str) -> None:
    """Set the session cookie, valid for one idle window from now."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=SESSION_IDLE_TIMEOUT_SECONDS,
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="lax",
    )


def get_current_identity(
    request: Request,
    response: Response,
    session_manager: SessionManagerDep,
    token: Optional[str] = Depends(get_session_token),
) -> Identity:
    """Get the identity bound to the caller's session (ANONYMOUS if none).

    Every lookup restarts the server-side idle timer, so a cookie-borne
    session also gets its cookie re-issued to keep both lifetimes aligned.
    """
    identity = session_manager.get_identity(token)
    if not identity.is_anonymous and request.cookies.get(SESSION_COOKIE_NAME) == token:
        set_session_cookie(response, token)
    return identity


def require_roles(*roles: str) -> Callable[..., Identity]:
    """Build a dependency that admits only callers holding one of ``roles``.

    Args:
        *roles: Roles allowed through.

    Returns:
        Dependency returning the caller's Identity.
    """

    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        try:
            return authorize(identity, roles)
        except ForbiddenError as e:
            logger.info(
                "Denied %s access to %s-only action", identity.role or "anonymous", roles
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=e.message,
            )

    return dependency


@router.post("/signup", summary="Create an account")
def signup(req: SignupRequest, user_manager: UserManagerDep) -> dict:
    """Register a new customer or dealer.

    Args:
        req: Signup request with username, password and role.
        user_manager: Injected UserManager instance.

    Returns:
        Dictionary with success flag and message.

    Raises:
        HTTPException: 400 on missing fields or unknown role, 409 if the
            username is taken.
    """
    try:
        user_manager.create_user(
            username=req.username,
            password=req.password,
            role=req.role,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except UserAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )

    return {"success": True, "message": "Signup successful! Please login."}


@router.post("/login", response_model=LoginResponse, summary="Log in")
def login(
    req: LoginRequest,
    response: Response,
    user_manager: UserManagerDep,
    session_manager: SessionManagerDep,
) -> LoginResponse:
    """Login with username and password.

    On success a session is started and its token is set as an HTTP-only
    cookie and returned in the body.

    Raises:
        HTTPException: 400 on missing fields, 401 on bad credentials.
    """
    try:
        user = user_manager.authenticate(req.username, req.password)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        )

    token = session_manager.create_session(user.username, user.role)
    set_session_cookie(response, token)
    return LoginResponse(username=user.username, role=user.role, token=token)


@router.api_route("/logout", methods=["POST", "GET"], summary="Log out")
def logout(
    response: Response,
    session_manager: SessionManagerDep,
    token: Optional[str] = Depends(get_session_token),
) -> dict:
    """End the caller's session. Safe to call when not logged in.

    GET is accepted as well because the shop front end logs out with a
    plain fetch.
    """
    session_manager.destroy_session(token)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"success": True, "message": "Logged out successfully."}


@router.get("/user", response_model=CurrentUserResponse, response_model_exclude_none=True,
            summary="Current user")
def current_user(
    identity: Identity = Depends(get_current_identity),
) -> CurrentUserResponse:
    """Get the logged-in user's name and role.

    Returns:
        CurrentUserResponse; ``success`` is false when nobody is logged in.
    """
    if identity.is_anonymous:
        return CurrentUserResponse(success=False, message="No user logged in.")
    return CurrentUserResponse(
        success=True, username=identity.username, role=identity.role
    )
