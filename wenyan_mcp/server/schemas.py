"""Pydantic schemas for request/response models.

FastAPI 개발용 브리지의 요청/응답 모델을 정의합니다.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Command 관련 스키마
# ============================================================================

class CommandExecuteRequest(BaseModel):
    """명령(툴) 실행 요청 모델.

    Attributes:
        name: 실행할 툴의 이름
            가능한 값: "publish_article", "list_themes", "publish_image_message"
        params: 툴별 파라미터 딕셔너리 (MCP tools/call의 arguments와 동일)
    """
    name: str = Field(..., description="Tool name to execute")
    params: Dict[str, Any] = Field(default_factory=dict, description="Tool parameters")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "publish_image_message",
                "params": {
                    "title": "周末出游",
                    "content": "三张照片记录一下",
                    "images": ["https://example.com/a.jpg", "/tmp/b.png"]
                }
            }
        }
    )


class ContentBlock(BaseModel):
    """MCP content 블록 (현재는 text 타입만 사용)."""
    type: str = "text"
    text: str


class CommandExecuteResult(BaseModel):
    """명령 실행 결과 응답 모델.

    Attributes:
        ok: 실행 성공 여부
        tool: 실행된 툴의 이름
        content: 툴이 반환한 content 블록 목록
    """
    ok: bool
    tool: str
    content: List[ContentBlock]


class ToolSchema(BaseModel):
    """툴 스키마 정의 모델.

    MCP tools/list 응답의 항목과 같은 정보를 담습니다.
    """
    name: str
    description: str
    input_schema: Dict[str, Any]


class CommandsListResponse(BaseModel):
    """사용 가능한 명령(툴) 목록 응답 모델."""
    tools: List[ToolSchema]


# ============================================================================
# Error 관련 스키마
# ============================================================================

class ErrorDetail(BaseModel):
    """에러 상세 정보 모델.

    Attributes:
        type: 에러 타입 (예: "ValidationError", "ToolExecutionError")
        message: 사람이 읽을 수 있는 에러 메시지
        code: 에러 코드 (예: "INVALID_PARAMS", "EXECUTION_ERROR")
        request_id: 요청 추적용 ID
    """
    type: str
    message: str
    code: Optional[str] = None
    request_id: Optional[str] = None


class ErrorResponse(BaseModel):
    """에러 응답 래퍼 모델."""
    error: ErrorDetail
