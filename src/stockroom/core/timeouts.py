"""Request-scoped timeout for store calls.

Every read or write made on behalf of one request runs under
``REQUEST_TIMEOUT_SECONDS``. A cancelled write rolls back with its
transaction, so a timeout never leaves partial data behind.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from . import config
from .errors import StoreTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def within_request_timeout(aw: Awaitable[T], what: str) -> T:
    try:
        return await asyncio.wait_for(aw, timeout=config.REQUEST_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.warning(f"{what} exceeded {config.REQUEST_TIMEOUT_SECONDS}s")
        raise StoreTimeoutError(f"{what} took too long, please retry.")
