"""
Page Credential Resolver

Maps a page id to its access token. Absence is logged, never raised:
callers decide how to fail their own operation.
"""

import logging
from typing import Iterable, Optional

from infra.config import PageAccount

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Read-only lookup over the configured page accounts."""

    def __init__(self, accounts: Iterable[PageAccount]):
        self._accounts = list(accounts)
        self._tokens = {account.page_id: account.access_token for account in self._accounts}

    @property
    def accounts(self) -> list[PageAccount]:
        return list(self._accounts)

    def page_ids(self) -> list[str]:
        """Configured page ids, in configuration order."""
        return [account.page_id for account in self._accounts]

    def resolve(self, page_id: str) -> Optional[str]:
        """
        Return the access token for `page_id`, or None if not configured.
        """
        token = self._tokens.get(page_id)
        if not token:
            logger.error(f"No access token configured for page {page_id}")
            return None
        return token
