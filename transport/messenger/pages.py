"""
Page Directory

Looks up display metadata for every configured page, concurrently.
Failed lookups are logged and left out of the result.
"""

import asyncio
import logging
from typing import Optional

from infra.config import PageAccount

from .credentials import CredentialResolver
from .graph import GraphAPIError, GraphClient
from .schemas import PageInfo

logger = logging.getLogger(__name__)


async def fetch_pages_info(
    resolver: CredentialResolver,
    graph: GraphClient,
) -> list[PageInfo]:
    """
    Fetch name and picture of every configured page.

    All lookups run concurrently and are joined on completion, success or
    failure. The result keeps configuration order.
    """
    accounts = resolver.accounts
    if not accounts:
        return []

    results = await asyncio.gather(
        *(_fetch_page_info(account, graph) for account in accounts)
    )
    return [info for info in results if info is not None]


async def _fetch_page_info(account: PageAccount, graph: GraphClient) -> Optional[PageInfo]:
    try:
        data = await graph.get_page_info(account.page_id, account.access_token)
    except GraphAPIError as e:
        logger.error(f"Failed to fetch info for page {account.page_id}: {e.message}")
        return None

    if not isinstance(data, dict):
        logger.error(f"Unexpected page info response for page {account.page_id}: {type(data).__name__}")
        return None

    return PageInfo(
        id=account.page_id,
        name=data.get("name"),
        picture=data.get("picture"),
    )
