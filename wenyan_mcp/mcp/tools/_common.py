"""Helpers shared by the tool modules."""
from typing import Any, Dict, List, Tuple

from wenyan_mcp.mcp.errors import ConfigError
from wenyan_mcp.server.settings import settings


def text_content(text: str) -> Dict[str, Any]:
    """Build a single MCP text content block."""
    return {"type": "text", "text": text}


def text_result(*texts: str) -> List[Dict[str, Any]]:
    return [text_content(text) for text in texts]


def require_wechat_credentials() -> Tuple[str, str]:
    """Return (app_id, app_secret) or fail before any network call."""
    app_id = settings.WECHAT_APP_ID
    app_secret = settings.WECHAT_APP_SECRET
    if not app_id or not app_secret:
        raise ConfigError("WECHAT_APP_ID or WECHAT_APP_SECRET environment variable is not set")
    return app_id, app_secret
