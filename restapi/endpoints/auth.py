"""Authentication endpoints for user login and registration."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import ConflictError, InvalidCredentialsError, UnauthorizedError
from components.core.init_db import get_db
from components.core.schemas import ApiResponse
from components.core.security import (
    create_access_token,
    hash_password,
    verify_password,
    verify_token,
)
from components.user.models import User
from components.user.repository import UserRepository
from components.user.schemas import TokenPayload, User as UserSchema, UserCreate, UserLogin, UserWithToken

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """Get current user from the bearer token."""
    if credentials is None:
        raise UnauthorizedError("No token provided")
    payload = verify_token(credentials.credentials)

    user = await UserRepository(db).get_by_id(payload.user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    return user


def _session_for(user: User) -> UserWithToken:
    token = create_access_token(TokenPayload(user_id=user.id, email=user.email))
    return UserWithToken(user=UserSchema.model_validate(user), token=token)


@router.post(
    "/register",
    response_model=ApiResponse[UserWithToken],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserWithToken]:
    """Create new user and return a session token."""
    repo = UserRepository(db)
    if await repo.exists(user_in.email):
        raise ConflictError("User with this email already exists")

    password_hash = await run_in_threadpool(hash_password, user_in.password)
    user = await repo.create(user_in.email, password_hash)
    return ApiResponse(success=True, data=_session_for(user), message="User registered successfully")


@router.post(
    "/login",
    response_model=ApiResponse[UserWithToken],
)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserWithToken]:
    """Login user and return a session token."""
    user = await UserRepository(db).get_by_email(credentials.email)
    if user is None:
        raise InvalidCredentialsError()
    if not await run_in_threadpool(verify_password, credentials.password, user.password):
        logger.info("Rejected login for user %s", user.id)
        raise InvalidCredentialsError()
    return ApiResponse(success=True, data=_session_for(user), message="Login successful")
