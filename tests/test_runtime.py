from __future__ import annotations

import asyncio
import inspect
from unittest.mock import MagicMock, patch

import pytest
from fastmcp import Client
from mcp.types import TextContent

from use_aws_mcp.mcp_runtime import MCPServer, ToolResult, ToolSpec, _is_awaitable
from use_aws_mcp.tools import register_tools


class FakeFastToolResult:
    def __init__(self, content, structured_content):
        self.content = content
        self.structured_content = structured_content


class FakeTool:
    model_fields = {"parameters": object()}


def _capture_handler(tool: ToolSpec) -> tuple[dict[str, object], MagicMock, FakeTool]:
    captured: dict[str, object] = {}
    fake_tool = FakeTool()

    def _from_function(handler, **kwargs):
        captured["handler"] = handler
        captured["kwargs"] = kwargs
        return fake_tool

    fake_server = MagicMock()
    with patch("use_aws_mcp.mcp_runtime.FastMCP", return_value=fake_server):
        with patch("use_aws_mcp.mcp_runtime.FunctionTool") as mock_function_tool:
            mock_function_tool.from_function.side_effect = _from_function
            server = MCPServer("name", "v1", "ins")
            server.add_tool(tool)
    return captured, fake_server, fake_tool


def test_mcp_server_builds_fastmcp() -> None:
    with patch("use_aws_mcp.mcp_runtime.FastMCP") as mock_fastmcp:
        MCPServer("use_aws", "0.1.0", "inst")
    mock_fastmcp.assert_called_once_with(name="use_aws", version="0.1.0", instructions="inst")


def test_mcp_server_run_delegates() -> None:
    with patch("use_aws_mcp.mcp_runtime.FastMCP") as mock_fastmcp:
        server = MCPServer("name", "v1", "ins")
    server.run()
    mock_fastmcp.return_value.run.assert_called_once_with()


def test_add_tool_exposes_signature_and_schema() -> None:
    schema = {"type": "object", "properties": {"service_name": {}, "region": {}}}
    tool = ToolSpec(
        name="use_aws",
        description="desc",
        input_schema=schema,
        handler=lambda payload: ToolResult(content=[]),
    )

    captured, fake_server, fake_tool = _capture_handler(tool)

    handler = captured["handler"]
    assert list(inspect.signature(handler).parameters) == ["service_name", "region"]
    assert handler.__name__ == "_handler_use_aws"
    assert captured["kwargs"] == {"name": "use_aws", "description": "desc"}
    assert fake_tool.parameters == schema
    fake_server.add_tool.assert_called_once_with(fake_tool)


def test_add_tool_handler_filters_none_and_awaits() -> None:
    async def _handler(payload):
        return ToolResult(
            content=[{"type": "text", "text": str(sorted(payload))}],
            structured_content={"ok": True},
        )

    tool = ToolSpec(
        name="my.tool",
        description="desc",
        input_schema={"properties": {"a": {}, "b": {}}},
        handler=_handler,
    )
    captured, _, _ = _capture_handler(tool)

    with patch("use_aws_mcp.mcp_runtime.FastToolResult", FakeFastToolResult):
        result = asyncio.run(captured["handler"](a=1, b=None))

    assert isinstance(result, FakeFastToolResult)
    assert isinstance(result.content[0], TextContent)
    assert result.content[0].text == "['a']"
    assert result.structured_content == {"ok": True}


def test_add_tool_handler_sync_non_toolresult_raises() -> None:
    tool = ToolSpec(
        name="sync.tool",
        description="desc",
        input_schema={"properties": {"a": {}}},
        handler=lambda payload: {"not": "tool-result"},
    )
    captured, _, _ = _capture_handler(tool)

    with pytest.raises(TypeError, match="Tool handler did not return ToolResult"):
        asyncio.run(captured["handler"](a=1))


def test_is_awaitable_exception_path(monkeypatch) -> None:
    def _raise(_value):
        raise TypeError("boom")

    monkeypatch.setattr(inspect, "isawaitable", _raise)
    assert _is_awaitable(object()) is False


def test_add_tool_signature_carries_annotations() -> None:
    tool = ToolSpec(
        name="use_aws",
        description="desc",
        input_schema={"properties": {"service_name": {}, "approved": {}}},
        handler=lambda payload: ToolResult(content=[]),
    )
    captured, _, _ = _capture_handler(tool)

    handler = captured["handler"]
    assert handler.__annotations__ == {"service_name": object, "approved": object}


@pytest.mark.asyncio
async def test_use_aws_served_through_fastmcp() -> None:
    server = MCPServer("use_aws", "0.1.0", "instructions")
    register_tools(server)

    async with Client(server._server) as client:
        tools = await client.list_tools()
        result = await client.call_tool(
            "use_aws",
            {
                "service_name": "s3",
                "operation_name": "delete-bucket",
                "region": "us-east-1",
                "parameters": {"bucket": "logs"},
            },
        )

    assert [tool.name for tool in tools] == ["use_aws"]
    properties = tools[0].inputSchema["properties"]
    assert {"service_name", "operation_name", "region", "approved"} <= set(properties)
    assert tools[0].inputSchema["required"] == ["service_name", "operation_name", "region"]

    assert len(result.content) == 1
    text = result.content[0].text
    assert text.startswith("Running aws cli command:\n\nService name: s3\n")
    assert "Mode: write (requires acceptance)" in text
    assert result.structured_content["status"] == "rejected"
    assert result.structured_content["operation"] == "delete-bucket"
    assert result.structured_content["requiresAcceptance"] is True
