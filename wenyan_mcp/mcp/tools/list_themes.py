"""Tool for listing the themes available to publish_article."""
import json
from typing import Any, Dict, List

from wenyan_mcp.adapters import formatter
from wenyan_mcp.mcp.tools._common import text_content

TOOL = {
    "name": "list_themes",
    "title": "List Themes",
    "description": "List the themes compatible with the 'publish_article' tool to publish an article to '微信公众号'.",
    "inputSchema": {
        "type": "object",
        "properties": {}
    }
}


async def run(params: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return one text block per theme, each a JSON {id, name, description} record."""
    return [
        text_content(json.dumps(
            {
                "id": theme.id,
                "name": theme.name,
                "description": theme.description,
            },
            ensure_ascii=False,
        ))
        for theme in formatter.list_themes()
    ]
