# pokecatch/utils/clients.py
import logging
import httpx

from pokecatch.config import CATALOG_BASE_URL, CATALOG_TIMEOUT

logger = logging.getLogger("pokecatch.clients")


async def get_catalog_client():
    """
    Yields an httpx client bound to the external creature catalog (PokeAPI).
    One client per request; tests override this dependency with a MockTransport client.
    """
    async with httpx.AsyncClient(base_url=CATALOG_BASE_URL, timeout=CATALOG_TIMEOUT) as client:
        yield client
