# psd_engine/infrastructure/io/source_loader.py
import base64
import binascii
import logging
import os
from typing import Optional

import aiofiles
import aiohttp

from psd_engine.config.settings import settings
from psd_engine.domain.errors import SourceReadError

logger = logging.getLogger(__name__)


def decode_base64_source(src: str) -> bytes:
    if src.startswith("data:"):
        _, _, src = src.partition(",")
    try:
        # tolerate stripped padding
        return base64.b64decode(src + "===")
    except (binascii.Error, ValueError) as e:
        raise SourceReadError(f"Source is not valid base64 data: {e}") from e


async def load_source_bytes(src: str, session: Optional[aiohttp.ClientSession] = None) -> bytes:
    """Fetch document bytes from an URL, a local file, a data URI or raw base64."""
    if not src:
        raise SourceReadError("No document source provided.")
    try:
        if src.startswith(("http://", "https://")):
            if session is None:
                async with aiohttp.ClientSession() as own_session:
                    return await _fetch(src, own_session)
            return await _fetch(src, session)
        if os.path.isfile(src):
            async with aiofiles.open(src, "rb") as f:
                return await f.read()
    except (aiohttp.ClientError, OSError, TimeoutError) as e:
        logger.warning(f"Failed to load document from '{src[:70]}...': {type(e).__name__}")
        raise SourceReadError(f"Failed to read document from source: {e}") from e
    return decode_base64_source(src)


async def _fetch(url: str, session: aiohttp.ClientSession) -> bytes:
    timeout = aiohttp.ClientTimeout(total=settings.REQUEST_TIMEOUT)
    async with session.get(url, timeout=timeout) as response:
        response.raise_for_status()
        return await response.read()
