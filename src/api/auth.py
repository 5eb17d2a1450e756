"""API-key gate.

Every organized-data and parser route depends on `require_api_key`. A key
is accepted only when it is a UUID naming an active row in `api_keys`
whose application exists; anything else is a 401.
"""

import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import ApiKey, Application
from src.db.session import get_session
from src.utils.logging import log, get_logger

MODULE = "auth"
logger = get_logger()

API_KEY_HEADER = "X-API-KEY"


def parse_api_key(raw: Optional[str]) -> Optional[uuid.UUID]:
    """The key as a UUID, or None when it is missing or malformed."""
    if not raw:
        return None
    try:
        return uuid.UUID(raw.strip())
    except ValueError:
        return None


async def validate_api_key(session: AsyncSession, raw: Optional[str]) -> bool:
    key_id = parse_api_key(raw)
    if key_id is None:
        return False

    result = await session.execute(
        select(ApiKey.id)
        .join(Application, ApiKey.application_id == Application.id)
        .where(ApiKey.id == key_id, ApiKey.is_active.is_(True))
    )
    return result.scalar_one_or_none() is not None


async def require_api_key(
    x_api_key: Optional[str] = Header(None, alias=API_KEY_HEADER),
    session: AsyncSession = Depends(get_session),
) -> str:
    if not await validate_api_key(session, x_api_key):
        # Never log the key itself
        log.warning(logger, MODULE, "invalid_api_key", "Invalid or missing API key",
                    present=bool(x_api_key))
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_api_key
