"""
Relay initialization and bootstrap.

Singleton pattern for creating the relay components from configuration.
Routes receive it through the `get_bootstrap` dependency.
"""

from typing import Optional

from realtime.broadcast import BroadcastChannel
from transport.messenger.credentials import CredentialResolver
from transport.messenger.graph import GraphClient
from transport.messenger.profiles import ProfileCache

from .config import RelayConfig, get_config


class RelayBootstrap:
    """
    Bootstrap relay components based on configuration.

    Singleton pattern - single instance per process.
    """

    _instance: Optional["RelayBootstrap"] = None

    def __init__(
        self,
        config: Optional[RelayConfig] = None,
        graph: Optional[GraphClient] = None,
    ):
        """Initialize bootstrap with configuration."""
        self.config = config or get_config()
        self.credentials = CredentialResolver(self.config.accounts)
        self.graph = graph or GraphClient(
            base_url=self.config.graph_base_url,
            api_version=self.config.graph_api_version,
            timeout=self.config.graph_timeout,
        )
        self.profile_cache = ProfileCache(
            self.credentials,
            self.graph,
            max_entries=self.config.profile_cache_size,
        )
        self.broadcast_channel = BroadcastChannel()

    @classmethod
    def get_instance(cls, config: Optional[RelayConfig] = None) -> "RelayBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton RelayBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    async def aclose(self) -> None:
        """Release the Graph API connection pool."""
        await self.graph.aclose()

    def __repr__(self) -> str:
        """String representation showing configured pages."""
        return (
            f"RelayBootstrap(pages={self.config.page_ids}, "
            f"graph={self.config.graph_api_version}, "
            f"clients={self.broadcast_channel.connection_count})"
        )


def bootstrap_relay(config: Optional[RelayConfig] = None) -> RelayBootstrap:
    """
    Bootstrap all relay components.

    Args:
        config: Optional custom configuration

    Returns:
        RelayBootstrap instance with all components initialized
    """
    return RelayBootstrap.get_instance(config)


def get_bootstrap() -> RelayBootstrap:
    """FastAPI dependency returning the process-wide bootstrap."""
    return RelayBootstrap.get_instance()
