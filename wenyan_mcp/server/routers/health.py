"""Health check endpoints."""
from fastapi import APIRouter
from typing import Dict, Any
from wenyan_mcp.server.settings import settings

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, str]:
    """Basic health check endpoint.

    Returns:
        Simple status response
    """
    return {"status": "ok"}


@router.get("/readyz")
async def readiness_check() -> Dict[str, Any]:
    """Readiness check endpoint.

    WeChat 자격 증명이 설정되어 있는지 확인합니다.
    list_themes는 자격 증명 없이도 동작하지만, 게시 도구는 실패합니다.

    Returns:
        Status response with readiness info
    """
    checks = {
        "wechat_app_id": bool(settings.WECHAT_APP_ID),
        "wechat_app_secret": bool(settings.WECHAT_APP_SECRET),
        "wechat_api_base_url": bool(settings.WECHAT_API_BASE_URL),
    }

    ready = all(checks.values())

    return {
        "status": "ok" if ready else "not_ready",
        "checks": checks
    }
