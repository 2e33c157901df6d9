"""
Access gate for private endpoints.

`get_current_identity` is a FastAPI dependency: it reads the token header,
verifies it and attaches the resulting `Identity` to `request.state`. It never
touches the database; ownership checks happen in the services.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from devconnector.auth.tokens import InvalidToken, TokenCodec, TokenConfig
from devconnector.config import settings
from devconnector.errors import Unauthenticated
from devconnector.telemetry import AUTH_FAILURES_TOTAL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    id: str


@lru_cache
def get_token_codec() -> TokenCodec:
    """Process-wide codec built from settings on first use."""
    return TokenCodec(TokenConfig.from_settings(settings))


Codec = Annotated[TokenCodec, Depends(get_token_codec)]


async def get_current_identity(request: Request, codec: Codec) -> Identity:
    token = request.headers.get(settings.token_header)
    if not token:
        AUTH_FAILURES_TOTAL.labels(reason="missing").inc()
        raise Unauthenticated("No token, authorization denied")

    try:
        identity_id = codec.verify(token)
    except InvalidToken as exc:
        # ExpiredToken is a subclass; both are terminal for the request
        reason = type(exc).__name__
        AUTH_FAILURES_TOTAL.labels(reason=reason).inc()
        logger.warning("Rejected token on %s: %s", request.url.path, reason)
        raise Unauthenticated("Token is not valid") from exc

    identity = Identity(id=identity_id)
    request.state.identity = identity
    return identity


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
