"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from infra.bootstrap import RelayBootstrap  # noqa: E402
from infra.config import PageAccount, RelayConfig  # noqa: E402
from transport.messenger.graph import GraphClient  # noqa: E402


VERIFY_TOKEN = "verify-secret"


@pytest.fixture
def relay_config():
    """One page `A1` with token `T1`."""
    return RelayConfig(
        verify_token=VERIFY_TOKEN,
        accounts=[PageAccount(page_id="A1", access_token="T1")],
    )


@pytest.fixture
def graph():
    """Graph API client with every remote call mocked."""
    graph = MagicMock(spec=GraphClient)
    graph.get_user_profile = AsyncMock(
        return_value={"name": "Jane Doe", "profile_pic": "https://cdn.example/jane.jpg"}
    )
    graph.get_page_info = AsyncMock(
        return_value={"name": "My Page", "picture": {"data": {"url": "https://cdn.example/page.jpg"}}}
    )
    graph.send_message = AsyncMock(
        return_value={"recipient_id": "U1", "message_id": "m_out"}
    )
    graph.aclose = AsyncMock()
    return graph


@pytest.fixture
def bootstrap(relay_config, graph):
    """Relay components wired to the mocked Graph client."""
    RelayBootstrap.reset()
    yield RelayBootstrap(relay_config, graph=graph)
    RelayBootstrap.reset()
