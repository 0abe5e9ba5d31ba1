import pytest
from fastmcp import Client


@pytest.mark.asyncio
async def test_server_name_and_ping():
    from keyident.server import mcp

    assert getattr(mcp, "name", "") == "KeyIdent"

    async with Client(mcp) as client:
        result = await client.call_tool("ping", {})
        assert result.data == "pong"
        assert result.structured_content == {"result": "pong"}


@pytest.mark.asyncio
async def test_tools_are_listed():
    from keyident.server import mcp

    async with Client(mcp) as client:
        names = {t.name for t in await client.list_tools()}
    assert {
        "ping",
        "identify_from_local_path",
        "identify_from_b64_string",
        "scan_directory",
        "supported_formats",
    } <= names
