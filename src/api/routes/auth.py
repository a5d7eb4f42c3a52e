"""Authentication routes.

This module handles HTTP endpoints for user authentication and registration,
and provides ``get_current_user``, the auth gate every protected route
depends on.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import DEFAULT_USER_ROLE
from core.dependencies import EntityStoreDep
from core.exceptions import DuplicateRecordError
from schemas.user import (
    AuthResponse,
    LoginRequest,
    PublicUser,
    RegisterRequest,
    User,
    UserCreate,
)
from utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security; missing credentials are reported as 401 below
security = HTTPBearer(auto_error=False)


async def get_current_user(
    store: EntityStoreDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """Resolve the authenticated user from the bearer token.

    Args:
        store: Injected entity store.
        credentials: HTTP Bearer token credentials, if any.

    Returns:
        Current User object.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired, or names
            a user the store does not know.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    user = await store.get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(
        user.id, extra_claims={"username": user.username, "role": user.role}
    )
    return AuthResponse(user=user.to_public(), token=token)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
async def register(req: RegisterRequest, store: EntityStoreDep) -> AuthResponse:
    """Register a new employee account and log it in.

    Raises:
        HTTPException: 400 if the username is taken.
    """
    if await store.get_user_by_username(req.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists",
        )
    try:
        user = await store.create_user(
            UserCreate(
                username=req.username,
                name=req.name,
                email=req.email,
                password_hash=hash_password(req.password),
                role=DEFAULT_USER_ROLE,
            )
        )
    except DuplicateRecordError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists",
        )
    logger.info("Registered user: %s", user.username)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse, summary="Log in")
async def login(req: LoginRequest, store: EntityStoreDep) -> AuthResponse:
    """Login with username and password.

    Raises:
        HTTPException: 401 on unknown user or wrong password.
    """
    user = await store.get_user_by_username(req.username)
    if user is None or not verify_password(req.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return _auth_response(user)


@router.post("/logout", summary="Log out")
def logout() -> dict:
    """Logout endpoint.

    Tokens are stateless, so logout is handled client-side by discarding the
    token. This endpoint exists for API consistency.
    """
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=PublicUser, summary="Current user")
def get_current_user_info(current_user: CurrentUserDep) -> PublicUser:
    return current_user.to_public()
