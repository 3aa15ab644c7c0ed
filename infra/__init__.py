"""
Infrastructure module exports.

Configuration for the relay components. The bootstrap lives in
infra.bootstrap and is imported from there, since it depends on the
transport and real-time layers.
"""

from .config import PAGE_TOKEN_PREFIX, PageAccount, RelayConfig, get_config, load_page_accounts

__all__ = [
    "PAGE_TOKEN_PREFIX",
    "PageAccount",
    "RelayConfig",
    "get_config",
    "load_page_accounts",
]
