"""
Accounts: registration, login and the current-user lookup.

Both registration and login answer with a fresh token; there is no session
state on the server.
"""
import hashlib
import logging
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.auth.passwords import hash_password, verify_password
from devconnector.auth.tokens import TokenCodec
from devconnector.config import settings
from devconnector.errors import InvalidCredentials, UserAlreadyExists, UserNotFound
from devconnector.models import User
from devconnector.schemas import LoginInput, RegisterInput, TokenResponse, UserResponse

logger = logging.getLogger(__name__)


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    query = urlencode(
        {
            "s": settings.gravatar_size,
            "r": settings.gravatar_rating,
            "d": settings.gravatar_default,
        }
    )
    return f"//www.gravatar.com/avatar/{digest}?{query}"


async def _find_by_email(db: AsyncSession, email: str) -> User | None:
    rows = await db.execute(select(User).where(User.email == email))
    return rows.scalar_one_or_none()


async def register(db: AsyncSession, codec: TokenCodec, body: RegisterInput) -> TokenResponse:
    email = body.email.lower()
    if await _find_by_email(db, email):
        raise UserAlreadyExists()

    user = User(
        name=body.name,
        email=email,
        password=hash_password(body.password),
        avatar=gravatar_url(email),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise UserAlreadyExists()

    logger.info("Registered user %s (id=%s)", email, user.user_id)
    return TokenResponse(token=codec.issue(user.user_id))


async def login(db: AsyncSession, codec: TokenCodec, body: LoginInput) -> TokenResponse:
    user = await _find_by_email(db, body.email.lower())
    if user is None or not verify_password(body.password, user.password):
        raise InvalidCredentials()
    return TokenResponse(token=codec.issue(user.user_id))


async def get_user(db: AsyncSession, user_id: str) -> UserResponse:
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFound()
    return UserResponse.model_validate(user)
