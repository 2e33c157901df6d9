"""
JWT identity tokens.

Payload shape: {"user": {"id": <user_id>}, "iat": <unix>, "exp": <unix>}

Tokens are never refreshed or revoked server-side; expiry is the only way a
token stops being valid.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import jwt

logger = logging.getLogger(__name__)


class TokenError(Exception):
    pass


class InvalidToken(TokenError):
    """Bad signature, malformed token, or no identity in the payload."""


class ExpiredToken(InvalidToken):
    """Signature is fine but `exp` has passed."""


class SigningError(TokenError):
    """No signing key configured, or the key could not be used."""


@dataclass(frozen=True)
class TokenConfig:
    secret_key: Optional[str]
    algorithm: str = "HS256"
    ttl_seconds: int = 3600

    @classmethod
    def from_settings(cls, settings) -> "TokenConfig":
        return cls(
            secret_key=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl_seconds=settings.jwt_ttl_seconds,
        )


class TokenCodec:
    def __init__(self, config: TokenConfig, clock: Callable[[], float] = time.time):
        self.config = config
        self._clock = clock

    def _key(self) -> str:
        if not self.config.secret_key:
            raise SigningError("JWT signing key is not configured")
        return self.config.secret_key

    def issue(self, identity_id: str, ttl_seconds: Optional[int] = None) -> str:
        """Sign a token for `identity_id` valid for `ttl_seconds` from now."""
        key = self._key()
        if ttl_seconds is None:
            ttl_seconds = self.config.ttl_seconds
        now = int(self._clock())
        payload = {
            "user": {"id": str(identity_id)},
            "iat": now,
            "exp": now + ttl_seconds,
        }
        try:
            return jwt.encode(payload, key, algorithm=self.config.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise SigningError(str(exc)) from exc

    def verify(self, token: str) -> str:
        """Return the identity id carried by `token`."""
        key = self._key()
        try:
            # Time claims are checked below against the codec's own clock
            payload = jwt.decode(
                token,
                key,
                algorithms=[self.config.algorithm],
                options={"require": ["exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken(str(exc)) from exc

        try:
            expires_at = int(payload["exp"])
        except (TypeError, ValueError) as exc:
            raise InvalidToken("Expiration Time claim (exp) must be an integer") from exc
        if self._clock() > expires_at:
            raise ExpiredToken("Signature has expired")

        user = payload.get("user")
        if not isinstance(user, dict) or not user.get("id"):
            raise InvalidToken("Token payload carries no identity")
        return str(user["id"])
