"""
Tests for kaiten_mcp.server module.
"""
import json
import pytest
from kaiten_mcp import server as server_module
from kaiten_mcp.config import load_settings
from kaiten_mcp.integrations.kaiten_client import KaitenAPIError
from kaiten_mcp.integrations.kaiten_types import KaitenCard
from kaiten_mcp.operations import KaitenOperations
from kaiten_mcp.server import _call, build_server
from tests.payloads import make_card


class CardClient:
    """Serves one card, or raises the configured error."""

    def __init__(self, error=None):
        self.error = error

    async def get_card(self, card_id):
        if self.error:
            raise self.error
        return KaitenCard(**make_card(card_id))

    async def list_comments(self, card_id):
        return []


@pytest.fixture
def server(client_config):
    return build_server(KaitenOperations(client_config))


@pytest.mark.asyncio
async def test_registers_all_tools(server):
    tools = await server.list_tools()

    assert sorted(t.name for t in tools) == [
        "create_task",
        "get_task_details",
        "get_task_status",
        "get_time_logs",
        "update_task",
    ]


@pytest.mark.asyncio
async def test_input_schemas_declare_limits(server):
    """Callers see the parameter bounds before calling."""
    schemas = {t.name: t.inputSchema["properties"] for t in await server.list_tools()}

    details = schemas["get_task_details"]
    assert details["card_id"]["exclusiveMinimum"] == 0
    assert details["comments_limit"]["minimum"] == 1
    assert details["comments_limit"]["maximum"] == 100
    assert details["comments_offset"]["minimum"] == 0
    assert schemas["get_time_logs"]["group_by"]["enum"] == ["none", "user", "date"]
    assert schemas["get_task_status"]["card_ids"]["minItems"] == 1
    assert schemas["get_task_status"]["card_ids"]["maxItems"] == 50
    assert schemas["create_task"]["title"]["maxLength"] == 500


@pytest.mark.asyncio
async def test_error_result_carries_bare_message(client_config):
    """A failed operation reaches the transport as isError with the exact message."""
    operations = KaitenOperations(
        client_config, client=CardClient(error=KaitenAPIError.from_status(404, "/cards/1"))
    )

    result = await _call(operations, "get_task_details", card_id=1)

    assert result.isError is True
    assert [c.text for c in result.content] == ["Card not found"]


@pytest.mark.asyncio
async def test_success_result_is_json_text(client_config):
    operations = KaitenOperations(client_config, client=CardClient())

    result = await _call(operations, "get_task_details", card_id=7, include_comments=None)

    assert result.isError is False
    payload = json.loads(result.content[0].text)
    assert payload["card_id"] == 7
    assert payload["comments"]["total"] == 0


def test_main_exits_without_configuration(monkeypatch):
    """Missing URL or token stops the process before a server is built."""
    monkeypatch.delenv("KAITEN_API_TOKEN", raising=False)
    monkeypatch.delenv("KAITEN_BASE_URL", raising=False)
    monkeypatch.setattr(server_module, "load_dotenv", lambda: None)
    monkeypatch.setattr(server_module, "load_settings", lambda: load_settings(_env_file=None))

    with pytest.raises(SystemExit) as exc_info:
        server_module.main()

    assert exc_info.value.code == 1


def test_main_exits_on_invalid_setting(monkeypatch):
    monkeypatch.setenv("KAITEN_API_TOKEN", "secret")
    monkeypatch.setenv("KAITEN_BASE_URL", "https://acme.kaiten.ru/api/latest")
    monkeypatch.setenv("KAITEN_TIMEOUT", "-1")
    monkeypatch.setattr(server_module, "load_dotenv", lambda: None)
    monkeypatch.setattr(server_module, "load_settings", lambda: load_settings(_env_file=None))

    with pytest.raises(SystemExit) as exc_info:
        server_module.main()

    assert exc_info.value.code == 1
