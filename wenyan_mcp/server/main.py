"""FastAPI application entry point (HTTP dev bridge)."""
import logging
from fastapi import FastAPI
from wenyan_mcp import __version__
from wenyan_mcp.server.routers import health
from wenyan_mcp.server.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
# 요청 URL에 access_token/secret이 들어가므로 httpx 요청 로그는 끔
for _name in ("httpx", "httpcore"):
    logging.getLogger(_name).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """FastAPI 앱을 생성합니다.

    ENABLE_DIRECT_TOOLS가 켜져 있을 때만 툴 실행 엔드포인트를 등록합니다.
    """
    app = FastAPI(
        title="wenyan-mcp",
        description="HTTP bridge for the wenyan MCP tools (development only)",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.include_router(health.router)

    # 조건부: 개발 환경에서만 직접 툴 실행 엔드포인트 활성화
    if settings.ENABLE_DIRECT_TOOLS:
        from wenyan_mcp.server.routers import commands
        app.include_router(commands.router)
        logger.warning("⚠️  Direct tool execution endpoints enabled (development mode)")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "wenyan-mcp HTTP bridge",
            "version": __version__,
            "docs": "/docs"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "wenyan_mcp.server.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
    )
