"""Async client helpers for the WeChat Official Account API.

WeChat 公众号 HTTP API 어댑터
- access_token 발급 (cgi-bin/token)
- 영구 소재 업로드 (cgi-bin/material/add_material)
- 본문 이미지 업로드 (cgi-bin/media/uploadimg)
- 초안 생성 (cgi-bin/draft/add)

모든 응답은 HTTP 상태와 무관하게 errcode/errmsg를 포함할 수 있으므로
상태 코드와 errcode를 항상 함께 확인합니다. 재시도는 하지 않습니다.
"""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

import httpx

from wenyan_mcp.models.media import (
    AccessToken,
    ImageMessageDraft,
    LocalSource,
    MaterialType,
    MediaSource,
    RemoteSource,
    VideoDescription,
    classify_source,
)
from wenyan_mcp.server.settings import settings

logger = logging.getLogger(__name__)


class WeChatAPIError(RuntimeError):
    """Raised when a WeChat API call fails.

    Attributes:
        errcode: 플랫폼이 반환한 errcode (있는 경우)
        status_code: HTTP 상태 코드 (있는 경우)
    """

    def __init__(
        self,
        message: str,
        *,
        errcode: Optional[int] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.errcode = errcode
        self.status_code = status_code


class CredentialError(WeChatAPIError):
    """Raised when an access token cannot be obtained."""


class DownloadError(WeChatAPIError):
    """Raised when a remote media source cannot be fetched."""


class UploadError(WeChatAPIError):
    """Raised when the platform rejects an uploaded material."""


class DraftError(WeChatAPIError):
    """Raised when the platform rejects a draft."""


def _build_url(path: str) -> str:
    base = settings.WECHAT_API_BASE_URL.rstrip("/")
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{base}{path}"


def _default_timeout() -> float:
    return settings.WECHAT_HTTP_TIMEOUT or 30.0


def _build_client() -> httpx.AsyncClient:
    """Create the HTTP client used for a single API call."""
    return httpx.AsyncClient(timeout=_default_timeout())


def _describe_platform_error(data: Dict[str, Any]) -> str:
    errcode = data.get("errcode")
    errmsg = data.get("errmsg")
    if errmsg:
        return f"{errmsg} (errcode {errcode})"
    return f"errcode {errcode}"


def _decode_json(
    response: httpx.Response,
    error_cls: Type[WeChatAPIError],
) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError as exc:
        preview = response.text[:200]
        logger.error("Failed to decode WeChat JSON response from %s: %s", response.url.path, preview)
        raise error_cls(
            f"invalid JSON response: {preview}",
            status_code=response.status_code,
        ) from exc

    if not isinstance(data, dict):
        raise error_cls("unexpected response payload", status_code=response.status_code)
    return data


def _check_errcode(data: Dict[str, Any], error_cls: Type[WeChatAPIError]) -> None:
    # errcode == 0 은 성공을 의미
    if data.get("errcode"):
        message = _describe_platform_error(data)
        logger.error("WeChat API returned %s: %s", error_cls.__name__, message)
        raise error_cls(message, errcode=data.get("errcode"))


# ============================================================================
# Credential Client
# ============================================================================

async def get_access_token(app_id: str, app_secret: str) -> AccessToken:
    """Obtain a fresh access token for the given app id/secret pair.

    캐시나 재시도 없이 한 번만 요청합니다.

    Args:
        app_id: WECHAT_APP_ID
        app_secret: WECHAT_APP_SECRET

    Returns:
        AccessToken

    Raises:
        CredentialError: errcode 응답, access_token 누락, 또는 네트워크 오류
    """
    url = _build_url("/cgi-bin/token")
    params = {
        "grant_type": "client_credential",
        "appid": app_id,
        "secret": app_secret,
    }

    try:
        async with _build_client() as client:
            response = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        logger.error("Access token request failed: %s", exc)
        raise CredentialError(f"token request failed: {exc}") from exc

    data = _decode_json(response, CredentialError)
    _check_errcode(data, CredentialError)

    token = data.get("access_token")
    if not token:
        raise CredentialError("access_token missing from response")

    logger.info("Obtained WeChat access token (expires_in=%s)", data.get("expires_in"))
    return AccessToken(value=token, expires_in=data.get("expires_in") or 7200)


# ============================================================================
# Media Uploader
# ============================================================================

async def _read_local(source: LocalSource) -> bytes:
    path = Path(source.path)
    try:
        # 파일 읽기는 블로킹 작업이므로 executor 사용
        return await asyncio.get_event_loop().run_in_executor(None, path.read_bytes)
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise UploadError(f"reading local file {source.path} failed: {reason}") from exc


async def _download_remote(client: httpx.AsyncClient, source: RemoteSource) -> bytes:
    try:
        response = await client.get(source.url, follow_redirects=True)
    except httpx.HTTPError as exc:
        logger.error("Failed to download %s: %s", source.url, exc)
        raise DownloadError(f"failed to download file from URL: {source.url}") from exc

    if not response.is_success or not response.content:
        logger.error("Download of %s returned status %s", source.url, response.status_code)
        raise DownloadError(
            f"failed to download file from URL: {source.url}",
            status_code=response.status_code,
        )
    return response.content


async def _resolve_payload(
    client: httpx.AsyncClient,
    source: MediaSource,
    material_type: MaterialType,
) -> Tuple[str, bytes]:
    filename = source.filename(material_type)
    if isinstance(source, RemoteSource):
        payload = await _download_remote(client, source)
    else:
        payload = await _read_local(source)
    return filename, payload


async def _post_material(
    client: httpx.AsyncClient,
    path: str,
    params: Dict[str, str],
    files: Dict[str, Tuple[str, bytes]],
    data: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    url = _build_url(path)
    try:
        response = await client.post(url, params=params, files=files, data=data)
    except httpx.HTTPError as exc:
        logger.error("Material upload request to %s failed: %s", path, exc)
        raise UploadError(f"upload request failed: {exc}") from exc

    if not response.is_success:
        logger.error(
            "Material upload responded with status %s: %s",
            response.status_code,
            response.text[:500],
        )
        raise UploadError(
            f"{response.status_code} {response.text}",
            status_code=response.status_code,
        )

    body = _decode_json(response, UploadError)
    _check_errcode(body, UploadError)
    return body


async def upload_material(
    access_token: AccessToken,
    source: str,
    material_type: MaterialType = "image",
    description: Optional[VideoDescription] = None,
) -> str:
    """Upload a local or remote file as a permanent material.

    처리 플로우:
    1. source를 Local/Remote로 분류
    2. 파일명과 바이트 페이로드 결정 (Remote는 다운로드)
    3. multipart 폼 구성 (media 필드, 비디오는 description 추가)
    4. add_material 엔드포인트로 전송
    5. 상태 코드 → errcode → media_id 순서로 검증

    Args:
        access_token: 호출마다 발급받은 AccessToken
        source: 로컬 경로 또는 http(s) URL
        material_type: "image" 또는 "video"
        description: 비디오 소재의 제목/소개 (비디오에만 사용)

    Returns:
        영구 소재 media_id

    Raises:
        DownloadError: 원격 파일을 가져오지 못한 경우
        UploadError: 플랫폼이 업로드를 거부했거나 media_id가 없는 경우
    """
    media_source = classify_source(source)

    async with _build_client() as client:
        filename, payload = await _resolve_payload(client, media_source, material_type)

        form: Optional[Dict[str, str]] = None
        if material_type == "video" and description is not None:
            form = {"description": description.to_form_value()}

        body = await _post_material(
            client,
            "/cgi-bin/material/add_material",
            params={"access_token": access_token.reveal(), "type": material_type},
            files={"media": (filename, payload)},
            data=form,
        )

    media_id = body.get("media_id")
    if not media_id:
        raise UploadError("media_id missing from response")

    logger.info("Uploaded %s material %s as %s", material_type, filename, media_id)
    return media_id


async def upload_article_image(access_token: AccessToken, source: str) -> str:
    """Upload an image used inside an article body and return its WeChat URL.

    uploadimg 엔드포인트는 media_id가 아닌 URL을 반환하며,
    소재 라이브러리에 저장되지 않습니다.
    """
    media_source = classify_source(source)

    async with _build_client() as client:
        filename, payload = await _resolve_payload(client, media_source, "image")
        body = await _post_material(
            client,
            "/cgi-bin/media/uploadimg",
            params={"access_token": access_token.reveal()},
            files={"media": (filename, payload)},
        )

    url = body.get("url")
    if not url:
        raise UploadError("url missing from response")
    return url


# ============================================================================
# Draft Composer
# ============================================================================

async def _add_draft(access_token: AccessToken, articles: List[Dict[str, Any]]) -> str:
    url = _build_url("/cgi-bin/draft/add")
    # 중국어가 \uXXXX 로 이스케이프되지 않도록 직접 직렬화
    body = json.dumps({"articles": articles}, ensure_ascii=False).encode("utf-8")

    try:
        async with _build_client() as client:
            response = await client.post(
                url,
                params={"access_token": access_token.reveal()},
                content=body,
                headers={"Content-Type": "application/json"},
            )
    except httpx.HTTPError as exc:
        logger.error("Draft request failed: %s", exc)
        raise DraftError(f"draft request failed: {exc}") from exc

    if not response.is_success:
        logger.error(
            "Draft endpoint responded with status %s: %s",
            response.status_code,
            response.text[:500],
        )
        raise DraftError(
            f"{response.status_code} {response.text}",
            status_code=response.status_code,
        )

    data = _decode_json(response, DraftError)
    _check_errcode(data, DraftError)

    media_id = data.get("media_id")
    if not media_id:
        raise DraftError("media_id missing from response")
    return media_id


async def publish_image_message_draft(
    access_token: AccessToken,
    title: str,
    content: str,
    image_media_ids: Sequence[str],
) -> str:
    """Create an image-and-text ("newspic") draft.

    이미지 순서는 입력 순서를 그대로 유지하며, 댓글 관련 플래그는 항상 0으로 고정합니다.

    Returns:
        생성된 초안의 media_id
    """
    draft = ImageMessageDraft(
        title=title,
        content=content,
        image_media_ids=list(image_media_ids),
    )
    media_id = await _add_draft(access_token, [draft.to_article()])
    logger.info("Created image message draft %s with %d images", media_id, len(draft.image_media_ids))
    return media_id


async def publish_news_draft(
    access_token: AccessToken,
    title: str,
    content: str,
    thumb_media_id: str,
    author: Optional[str] = None,
    digest: Optional[str] = None,
) -> str:
    """Create a regular article ("news") draft."""
    article: Dict[str, Any] = {
        "title": title,
        "content": content,
        "thumb_media_id": thumb_media_id,
        "need_open_comment": 0,
        "only_fans_can_comment": 0,
    }
    if author:
        article["author"] = author
    if digest:
        article["digest"] = digest

    media_id = await _add_draft(access_token, [article])
    logger.info("Created article draft %s", media_id)
    return media_id
