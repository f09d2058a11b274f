"""
Tests for the VibeCheck MCP server tools.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from fastmcp.exceptions import ToolError

from vibecheck.server import check_dependencies, mcp, scan_codebase


class TestVibeCheckMCPServer:
    def test_mcp_instance_exists(self):
        assert mcp is not None
        assert mcp.name == "vibecheck"

    @pytest.mark.asyncio
    async def test_scan_codebase_returns_json(self):
        result = await scan_codebase.fn(
            files=[{"path": "auth/login.ts", "content": "authenticate(user)"}],
        )
        data = json.loads(result)

        assert data["hotspots"][0]["category"] == "auth"
        assert data["summary"]["totalFiles"] == 1

    @pytest.mark.asyncio
    async def test_scan_codebase_without_input_is_tool_error(self):
        with pytest.raises(ToolError, match="Either path or files must be provided"):
            await scan_codebase.fn()

    @pytest.mark.asyncio
    async def test_scan_codebase_bad_path_is_tool_error(self, tmp_path):
        with pytest.raises(ToolError, match="does not exist"):
            await scan_codebase.fn(path=str(tmp_path / "missing"))

    @pytest.mark.asyncio
    async def test_check_dependencies_npm_unavailable(self, tmp_path):
        with patch("vibecheck.tools.check_dependencies.is_npm_available", new=AsyncMock(return_value=False)):
            result = await check_dependencies.fn(path=str(tmp_path))

        data = json.loads(result)
        assert data["toolAvailable"] is False
        assert data["vulnerabilities"] == []
        assert "npm is not available" in data["error"]

    @pytest.mark.asyncio
    async def test_check_dependencies_bad_path_is_tool_error(self, tmp_path):
        with patch("vibecheck.tools.check_dependencies.is_npm_available", new=AsyncMock(return_value=True)):
            with pytest.raises(ToolError):
                await check_dependencies.fn(path=str(tmp_path / "missing"))
