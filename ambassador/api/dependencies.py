from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from ambassador.core.config import SETTINGS
from ambassador.db.redis import redis_pool
from ambassador.models.principal import Principal
from ambassador.services import token_service
from ambassador.services.outbox import (
    EventPublisher,
    InMemoryEventPublisher,
    RedisEventPublisher,
    flush_outbox,
)
from ambassador.services.program import AmbassadorProgram, build_program

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")

# --- Module-level singletons (in-memory ledger, publisher per config) ---
program = build_program(SETTINGS)

if redis_pool is not None:
    publisher: EventPublisher = RedisEventPublisher(redis_pool)
else:
    publisher = InMemoryEventPublisher()


def get_program() -> AmbassadorProgram:
    return program


def get_publisher() -> EventPublisher:
    return publisher


ProgramDep = Annotated[AmbassadorProgram, Depends(get_program)]
PublisherDep = Annotated[EventPublisher, Depends(get_publisher)]


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer JWT and return the calling identity."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    return Principal(identity=claims["sub"])


CallerDep = Annotated[Principal, Depends(require_user)]


async def publish_committed(program: AmbassadorProgram, publisher: EventPublisher) -> None:
    """Flush notifications committed by the request's unit of work."""
    delivered = await flush_outbox(program.outbox, publisher)
    if delivered:
        logger.debug("Published %d notifications", delivered)
