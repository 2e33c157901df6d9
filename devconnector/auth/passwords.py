import bcrypt

from devconnector.config import settings


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash password using bcrypt"""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hashed value"""
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
