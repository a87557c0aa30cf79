"""Draft publisher for formatted articles.

formatter가 만든 HTML 본문을 公众号 초안함에 "news" 기사로 등록합니다.

처리 플로우:
1. WECHAT_APP_ID / WECHAT_APP_SECRET 확인
2. access_token 발급
3. 본문 <img>를 uploadimg로 업로드하고 src를 WeChat URL로 교체
4. 표지(cover 또는 본문 첫 이미지)를 영구 소재로 업로드 → thumb_media_id
5. draft/add 호출
"""
from __future__ import annotations

import html
import logging
import re
from typing import Dict, Optional

from wenyan_mcp.adapters import wechat_api
from wenyan_mcp.adapters.formatter import find_image_sources
from wenyan_mcp.adapters.wechat_api import CredentialError, DraftError
from wenyan_mcp.models.media import AccessToken
from wenyan_mcp.server.settings import settings

logger = logging.getLogger(__name__)

# 이미 公众号에 호스팅된 이미지는 다시 업로드하지 않음
WECHAT_IMAGE_HOST = "mmbiz.qpic.cn"

_IMG_TAG_SRC = re.compile(r"(<img\b[^>]*?\bsrc=)([\"'])([^\"']+)\2", re.IGNORECASE)


async def _upload_body_images(access_token: AccessToken, content: str) -> str:
    uploaded: Dict[str, str] = {}

    # 문서 순서대로 순차 업로드 (키는 엔티티를 디코딩한 실제 URL)
    for src in find_image_sources(content):
        if WECHAT_IMAGE_HOST in src or src in uploaded:
            continue
        uploaded[src] = await wechat_api.upload_article_image(access_token, src)

    if not uploaded:
        return content

    def _replace(match: "re.Match[str]") -> str:
        prefix, quote, escaped = match.groups()
        url = uploaded.get(html.unescape(escaped))
        if url is None:
            return match.group(0)
        return f"{prefix}{quote}{html.escape(url)}{quote}"

    return _IMG_TAG_SRC.sub(_replace, content)


async def publish_to_draft(
    title: str,
    content: str,
    cover: Optional[str] = None,
    author: Optional[str] = None,
    digest: Optional[str] = None,
) -> Dict[str, str]:
    """Publish a pre-rendered HTML article to the draft box.

    Args:
        title: 기사 제목
        content: 인라인 스타일이 적용된 HTML 본문
        cover: 표지 이미지 경로/URL (없으면 본문 첫 이미지 사용)

    Returns:
        {"media_id": 초안 media_id}

    Raises:
        CredentialError: 자격 증명이 없거나 토큰 발급 실패
        DownloadError / UploadError: 이미지 업로드 실패
        DraftError: 표지가 없거나 초안 생성 실패
    """
    app_id = settings.WECHAT_APP_ID
    app_secret = settings.WECHAT_APP_SECRET
    if not app_id or not app_secret:
        raise CredentialError("WECHAT_APP_ID or WECHAT_APP_SECRET environment variable is not set")

    access_token = await wechat_api.get_access_token(app_id, app_secret)

    # 표지 후보는 교체 전 원본 경로 기준으로 결정
    sources = find_image_sources(content)
    thumb_source = cover or (sources[0] if sources else None)
    if not thumb_source:
        raise DraftError("a cover image is required: set 'cover' in frontmatter or include an image in the article")

    body = await _upload_body_images(access_token, content)
    thumb_media_id = await wechat_api.upload_material(access_token, thumb_source, "image")

    media_id = await wechat_api.publish_news_draft(
        access_token,
        title=title,
        content=body,
        thumb_media_id=thumb_media_id,
        author=author,
        digest=digest,
    )
    return {"media_id": media_id}
