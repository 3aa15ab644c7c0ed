"""
Relay configuration.

Loaded once at startup from the environment and handed to every component.
Page accounts are discovered from keys named PAGE_TOKEN_<page_id>.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


PAGE_TOKEN_PREFIX = "PAGE_TOKEN_"

DEFAULT_GRAPH_BASE_URL = "https://graph.facebook.com"
DEFAULT_GRAPH_API_VERSION = "v19.0"


@dataclass(frozen=True)
class PageAccount:
    """A Messenger page and the access token that acts on its behalf."""

    page_id: str
    access_token: str

    def __repr__(self) -> str:
        return f"PageAccount(page_id={self.page_id!r}, access_token='***')"


@dataclass(frozen=True)
class RelayConfig:
    """Relay configuration from environment."""

    # Webhook
    verify_token: str
    app_secret: Optional[str] = None

    # Pages
    accounts: list[PageAccount] = field(default_factory=list)

    # Graph API
    graph_base_url: str = DEFAULT_GRAPH_BASE_URL
    graph_api_version: str = DEFAULT_GRAPH_API_VERSION
    graph_timeout: float = 30.0

    # Profile cache capacity (None = unbounded)
    profile_cache_size: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """
        Load configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.
        """
        env = os.environ if environ is None else environ

        cache_size = env.get("PROFILE_CACHE_SIZE", "").strip()

        return cls(
            verify_token=env.get("MESSENGER_VERIFY_TOKEN", ""),
            app_secret=env.get("MESSENGER_APP_SECRET") or None,
            accounts=load_page_accounts(env),
            graph_base_url=env.get("GRAPH_BASE_URL", DEFAULT_GRAPH_BASE_URL).rstrip("/"),
            graph_api_version=env.get("GRAPH_API_VERSION", DEFAULT_GRAPH_API_VERSION),
            graph_timeout=float(env.get("GRAPH_TIMEOUT", "30")),
            profile_cache_size=int(cache_size) if cache_size else None,
        )

    @property
    def page_ids(self) -> list[str]:
        return [account.page_id for account in self.accounts]


def load_page_accounts(environ: Mapping[str, str]) -> list[PageAccount]:
    """
    Collect PAGE_TOKEN_<page_id> entries into PageAccount records.

    Keys with an empty suffix or an empty value are skipped.
    """
    accounts = []
    for key, value in environ.items():
        if not key.startswith(PAGE_TOKEN_PREFIX):
            continue
        page_id = key[len(PAGE_TOKEN_PREFIX):]
        if page_id and value:
            accounts.append(PageAccount(page_id=page_id, access_token=value))
    return accounts


def get_config() -> RelayConfig:
    """Get relay configuration from the process environment."""
    return RelayConfig.from_env()
