"""
Shared fixtures.
"""
import pytest
from kaiten_mcp.config import ClientConfig
from tests.payloads import BASE_URL


@pytest.fixture
def client_config():
    """Client configuration pointing at a mocked Kaiten."""
    return ClientConfig(base_url=BASE_URL, token="test_token", timeout=5.0)
