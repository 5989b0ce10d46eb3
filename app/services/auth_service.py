import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import User, UserCreate, UserPublic

logger = logging.getLogger(__name__)


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, data: UserCreate) -> User | None:
    """Returns None if the email is already registered."""
    if await get_user_by_email(session, data.email):
        return None
    user = User(
        email=data.email.lower(),
        full_name=data.full_name,
        role=data.role,
        hashed_password=hash_password(data.password),
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


def user_to_public(user: User) -> UserPublic:
    return UserPublic(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
    )


def make_access_token(user: User) -> tuple[str, int]:
    access = create_access_token(user.id, user.role)
    expires_in = settings.access_token_expire_minutes * 60
    return access, expires_in


async def login_user(
    session: AsyncSession, email: str, password: str
) -> tuple[User, str, int] | None:
    user = await get_user_by_email(session, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    access, expires_in = make_access_token(user)
    return user, access, expires_in


async def ensure_bootstrap_admin(session: AsyncSession) -> User | None:
    """Create the configured admin account once; returns it only when newly created."""
    if not settings.bootstrap_admin_enabled:
        return None
    user = await create_user(
        session,
        UserCreate(
            email=settings.bootstrap_admin_email,
            password=settings.bootstrap_admin_password,
            full_name="Administrator",
            role="admin",
        ),
    )
    if user:
        logger.info("Bootstrap admin created: %s", user.email)
    return user
