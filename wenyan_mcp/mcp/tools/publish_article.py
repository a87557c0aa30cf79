"""Tool for formatting a Markdown article and publishing it to the draft box."""
import logging
from typing import Any, Dict, List

from wenyan_mcp.adapters import draft_publisher, formatter
from wenyan_mcp.adapters.wechat_api import WeChatAPIError
from wenyan_mcp.mcp.errors import ToolExecutionError, ValidationError
from wenyan_mcp.mcp.tools._common import require_wechat_credentials, text_result
from wenyan_mcp.server.settings import settings

logger = logging.getLogger(__name__)

# 코드 하이라이트 스타일과 formatter 플래그는 고정값
HIGHLIGHT_STYLE = "solarized-light"
DEFAULT_TITLE = "this is title"

TOOL = {
    "name": "publish_article",
    "title": "Publish Article",
    "description": "Format a Markdown article using a selected theme and publish it to '微信公众号'.",
    "inputSchema": {
        "type": "object",
        "properties": {
            "content": {
                "type": "string",
                "description": "The original Markdown content to publish, preserving its frontmatter (if present)."
            },
            "theme_id": {
                "type": "string",
                "description": "ID of the theme to use (e.g., default, orangeheart, rainbow, lapis, pie, maize, purple, phycat)."
            }
        },
        "required": ["content"]
    }
}


async def run(params: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Execute the tool.

    Args:
        params: Tool parameters
            - content: Markdown 원문 (필수)
            - theme_id: 테마 ID (선택, 기본값: settings.DEFAULT_THEME_ID)

    Returns:
        MCP text content 블록 목록 (초안 media_id 포함)
    """
    content = params.get("content")
    if not isinstance(content, str) or not content:
        raise ValidationError("content is required")
    theme_id = params.get("theme_id") or settings.DEFAULT_THEME_ID
    # 서식 적용 전에 자격 증명부터 확인 (네트워크 호출 없음)
    require_wechat_credentials()

    try:
        formatted = formatter.format_content(
            content,
            theme_id,
            HIGHLIGHT_STYLE,
            preserve_frontmatter=True,
            extract_cover=True,
        )
    except Exception as exc:
        logger.error("Formatting article failed: %s", exc)
        raise ToolExecutionError(f"formatting article failed: {exc}") from exc

    title = formatted.title or DEFAULT_TITLE
    cover = formatted.cover or ""

    try:
        response = await draft_publisher.publish_to_draft(
            title,
            formatted.content,
            cover,
            digest=formatted.description,
        )
    except WeChatAPIError as exc:
        raise ToolExecutionError(f"publishing article failed: {exc}") from exc

    return text_result(
        "Your article was successfully published to '公众号草稿箱'. "
        f"The media ID is {response['media_id']}."
    )
