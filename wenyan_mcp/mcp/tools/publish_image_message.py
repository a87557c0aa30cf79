"""Tool for publishing an image message (图片消息) to the draft box."""
import logging
from typing import Any, Dict, List, Tuple

from wenyan_mcp.adapters import wechat_api
from wenyan_mcp.adapters.wechat_api import (
    CredentialError,
    DownloadError,
    DraftError,
    UploadError,
)
from wenyan_mcp.mcp.errors import ToolExecutionError, ValidationError
from wenyan_mcp.mcp.tools._common import require_wechat_credentials, text_result
from wenyan_mcp.models.media import UploadedMaterial

logger = logging.getLogger(__name__)

TOOL = {
    "name": "publish_image_message",
    "title": "Publish Image Message",
    "description": (
        "发布图片消息（图文消息）到微信公众号草稿箱。"
        "图片消息由多张图片和一段文字描述组成，类似小红书笔记的形式。"
    ),
    "inputSchema": {
        "type": "object",
        "properties": {
            "title": {
                "type": "string",
                "description": "图片消息的标题"
            },
            "content": {
                "type": "string",
                "description": "文字描述内容"
            },
            "images": {
                "type": "array",
                "description": "图片列表，支持本地路径或网络URL",
                "items": {"type": "string"},
                "minItems": 1
            }
        },
        "required": ["title", "content", "images"]
    }
}


def _validate(params: Dict[str, Any]) -> Tuple[str, str, List[str]]:
    title = params.get("title")
    content = params.get("content")
    images = params.get("images")

    if not isinstance(title, str) or not title:
        raise ValidationError("title is required")
    if not isinstance(content, str) or not content:
        raise ValidationError("content is required")
    if not isinstance(images, list) or not images:
        raise ValidationError("images is required and must be a non-empty list")
    if not all(isinstance(image, str) and image for image in images):
        raise ValidationError("images must contain only non-empty strings")

    return title, content, images


async def run(params: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Execute the tool.

    처리 플로우:
    1. title / content / images 검증 (네트워크 호출 전)
    2. WECHAT_APP_ID / WECHAT_APP_SECRET 확인
    3. access_token 발급 (호출마다 새로 발급)
    4. 이미지를 입력 순서대로 하나씩 영구 소재로 업로드
       - 첫 실패에서 즉시 중단, 이미 업로드된 소재는 롤백하지 않음
    5. newspic 초안 생성

    Args:
        params: Tool parameters (title, content, images)

    Returns:
        MCP text content 블록 목록

    Raises:
        ValidationError: 인자 누락 또는 images가 비어 있음
        ConfigError: 환경 변수 누락
        ToolExecutionError: 토큰/업로드/초안 단계 실패
    """
    title, content, images = _validate(params)
    app_id, app_secret = require_wechat_credentials()

    try:
        access_token = await wechat_api.get_access_token(app_id, app_secret)
    except CredentialError as exc:
        raise ToolExecutionError(f"fetching access_token failed: {exc}") from exc

    uploaded: List[UploadedMaterial] = []
    total = len(images)
    for index, image in enumerate(images, start=1):
        try:
            media_id = await wechat_api.upload_material(access_token, image, "image")
        except DownloadError as exc:
            raise ToolExecutionError(f"downloading image {index} of {total} failed: {exc}") from exc
        except UploadError as exc:
            raise ToolExecutionError(f"uploading image {index} of {total} failed: {exc}") from exc
        uploaded.append(UploadedMaterial(media_id=media_id, material_type="image"))
        logger.info("Uploaded image material %d/%d", index, total)

    try:
        media_id = await wechat_api.publish_image_message_draft(
            access_token,
            title,
            content,
            [material.media_id for material in uploaded],
        )
    except DraftError as exc:
        raise ToolExecutionError(f"publishing image message draft failed: {exc}") from exc

    return text_result(f"图片消息已成功发布到公众号草稿箱。Media ID: {media_id}")
