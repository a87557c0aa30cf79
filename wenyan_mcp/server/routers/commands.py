"""Command execution endpoints (개발 전용).

⚠️  이 모듈은 개발/디버깅 용도로만 사용됩니다.
ENABLE_DIRECT_TOOLS=true 일 때만 등록됩니다.

MCP 클라이언트 없이 HTTP로 툴을 직접 실행합니다.
MCP 서버와 같은 라우터(tools.call_tool)를 사용하므로 동작이 동일합니다.

엔드포인트:
- GET /internal/v1/commands: 사용 가능한 툴 목록 및 스키마 조회
- POST /internal/v1/commands/execute: 지정된 툴 실행
"""
from fastapi import APIRouter, HTTPException, Header, status
from typing import Optional
from wenyan_mcp.mcp import tools
from wenyan_mcp.mcp.errors import ToolError, UnknownToolError, ValidationError
from wenyan_mcp.server.schemas import (
    CommandExecuteRequest,
    CommandExecuteResult,
    CommandsListResponse,
    ErrorDetail,
    ToolSchema,
)
import logging
import uuid

router = APIRouter(prefix="/internal/v1/commands", tags=["commands (dev only)"])
logger = logging.getLogger(__name__)


@router.get("", response_model=CommandsListResponse)
async def list_commands() -> CommandsListResponse:
    """사용 가능한 모든 툴의 메타데이터를 조회합니다."""
    return CommandsListResponse(tools=[
        ToolSchema(
            name=descriptor["name"],
            description=descriptor["description"],
            input_schema=descriptor["inputSchema"],
        )
        for descriptor in tools.list_tools()
    ])


def _error_detail(exc: Exception, code: str, request_id: str) -> dict:
    return {
        "error": ErrorDetail(
            type=type(exc).__name__,
            message=str(exc),
            code=code,
            request_id=request_id,
        ).model_dump()
    }


@router.post("/execute", response_model=CommandExecuteResult)
async def execute_command(
    request: CommandExecuteRequest,
    x_request_id: Optional[str] = Header(None),
) -> CommandExecuteResult:
    """지정된 툴을 실행합니다.

    처리 과정:
    1. Request ID 생성 또는 사용 (로그 추적용)
    2. tools.call_tool()로 실행
    3. 결과 반환 또는 에러 변환

    Raises:
        HTTPException:
            - 400: 툴이 존재하지 않거나 인자 검증 실패
            - 500: 툴 실행 중 에러 발생
    """
    request_id = x_request_id or str(uuid.uuid4())
    logger.info(f"Executing command '{request.name}' (request_id={request_id})")

    try:
        content = await tools.call_tool(request.name, request.params)
    except (UnknownToolError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error_detail(e, "INVALID_PARAMS", request_id),
        )
    except ToolError as e:
        logger.error(f"Error executing command '{request.name}': {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_error_detail(e, "EXECUTION_ERROR", request_id),
        )

    return CommandExecuteResult(ok=True, tool=request.name, content=content)
