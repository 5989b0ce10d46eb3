import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_roles
from app.api.schemas.auth import AccessToken, CreateUserRequest, LoginRequest
from app.core.db import get_session
from app.models.user import User, UserCreate, UserPublic
from app.services.auth_service import create_user, login_user, user_to_public

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=AccessToken)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> AccessToken:
    pair = await login_user(session, body.email, body.password)
    if not pair:
        logger.info("Failed login for %s", body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    user, access, expires_in = pair
    return AccessToken(access_token=access, expires_in=expires_in)


@router.get("/me", response_model=UserPublic)
async def me(current_user: User = Depends(get_current_user)) -> UserPublic:
    return user_to_public(current_user)


@router.post("/users", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def create_staff_user(
    body: CreateUserRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles("admin")),
) -> UserPublic:
    user = await create_user(
        session,
        UserCreate(email=body.email, password=body.password, full_name=body.full_name, role=body.role),
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists",
        )
    logger.info("User %s (%s) created by %s", user.email, user.role, current_user.email)
    return user_to_public(user)
