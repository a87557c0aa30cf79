"""MCP tools package.

각 툴 모듈은 TOOL(메타데이터)과 async run(params)를 제공합니다.
call_tool()은 이름으로 툴을 찾아 실행하는 라우터이며, 호출 간에 상태를 유지하지 않습니다.
"""
import logging
from typing import Any, Dict, List, Optional

from . import list_themes
from . import publish_article
from . import publish_image_message
from wenyan_mcp.mcp.errors import UnknownToolError

logger = logging.getLogger(__name__)

# Tool registry (도구 레지스트리) - 광고 순서 유지
TOOLS_REGISTRY = {
    "publish_article": publish_article,
    "list_themes": list_themes,
    "publish_image_message": publish_image_message,
}


def list_tools() -> List[Dict[str, Any]]:
    """Return the MCP descriptors ({name, description, inputSchema}) of every tool."""
    return [
        {
            "name": module.TOOL["name"],
            "description": module.TOOL["description"],
            "inputSchema": module.TOOL["inputSchema"],
        }
        for module in TOOLS_REGISTRY.values()
    ]


async def call_tool(name: Optional[str], arguments: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Route a tool invocation to its module.

    Raises:
        UnknownToolError: 등록되지 않은 툴 이름
        ToolError: 툴 실행 실패 (ValidationError, ConfigError, ToolExecutionError)
    """
    if name not in TOOLS_REGISTRY:
        raise UnknownToolError(f"Unknown tool: {name}")

    logger.info("Calling tool %s", name)
    return await TOOLS_REGISTRY[name].run(dict(arguments or {}))


__all__ = [
    "TOOLS_REGISTRY",
    "call_tool",
    "list_tools",
    "list_themes",
    "publish_article",
    "publish_image_message",
]
