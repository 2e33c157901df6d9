"""
Shared fixtures: a fresh SQLite database per test, a token codec with a test
key, and an HTTP client bound to the app with both wired in.
"""
import os

# Must be set before devconnector.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx
import pytest
import pytest_asyncio

from devconnector.auth.gate import get_token_codec
from devconnector.auth.passwords import hash_password
from devconnector.auth.tokens import TokenCodec, TokenConfig
from devconnector.database import get_db, init_db, make_engine, make_sessionmaker
from devconnector.main import app
from devconnector.models import Post, User

TEST_SECRET = "test-signing-key-0123456789abcdef0123456789"


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    async with make_sessionmaker(engine)() as session:
        yield session


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TokenConfig(secret_key=TEST_SECRET))


@pytest_asyncio.fixture
async def client(engine, codec):
    sessionmaker = make_sessionmaker(engine)

    async def override_get_db():
        async with sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_codec] = lambda: codec
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def make_user(db, name: str, email: str | None = None) -> User:
    user = User(
        name=name,
        email=email or f"{name.lower()}@example.com",
        password=hash_password("secret123", rounds=4),
        avatar=f"//www.gravatar.com/avatar/{name.lower()}",
    )
    db.add(user)
    await db.commit()
    return user


async def make_post(db, author: User, text: str = "Hello devs") -> Post:
    post = Post(user_id=author.user_id, text=text, name=author.name, avatar=author.avatar)
    db.add(post)
    await db.commit()
    return post
