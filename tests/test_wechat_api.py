"""Tests for the WeChat API adapter.

이 모듈은 WeChat 公众号 API 어댑터를 테스트합니다:
1. access_token 발급 (Credential Client)
2. 영구 소재 업로드 (Media Uploader) - Local/Remote × image/video
3. newspic 초안 생성 (Draft Composer)

모든 HTTP 호출은 conftest의 fake_wechat(httpx.MockTransport)으로 대체됩니다.
각 테스트는 Given-When-Then 패턴을 따릅니다.
"""
import json

import httpx
import pytest

from wenyan_mcp.adapters import wechat_api
from wenyan_mcp.adapters.wechat_api import (
    CredentialError,
    DownloadError,
    DraftError,
    UploadError,
)
from wenyan_mcp.models.media import AccessToken, VideoDescription


@pytest.fixture
def token():
    return AccessToken(value="ACCESS_TOKEN", expires_in=7200)


# ============================================================================
# Credential Client
# ============================================================================

@pytest.mark.asyncio
async def test_get_access_token(fake_wechat, wechat_credentials):
    """access_token 발급 성공.

    Given: 토큰 엔드포인트가 access_token을 반환하고
    When: get_access_token을 호출하면
    Then: grant_type/appid/secret 쿼리로 한 번 요청하고 토큰을 반환해야 함
    """
    token = await wechat_api.get_access_token("APPID", "SECRET")

    assert token.reveal() == "ACCESS_TOKEN"
    assert token.expires_in == 7200

    requests = fake_wechat.requests_to("/cgi-bin/token")
    assert len(requests) == 1
    assert requests[0].method == "GET"
    assert requests[0].url.params["grant_type"] == "client_credential"
    assert requests[0].url.params["appid"] == "APPID"
    assert requests[0].url.params["secret"] == "SECRET"


@pytest.mark.asyncio
async def test_get_access_token_errcode(fake_wechat, wechat_credentials):
    """플랫폼 에러 코드는 CredentialError로 그대로 전달.

    Given: 토큰 엔드포인트가 errcode 40001을 반환하고
    When: get_access_token을 호출하면
    Then: errcode와 errmsg를 모두 포함한 CredentialError가 발생해야 함
    """
    fake_wechat.token_response = {"errcode": 40001, "errmsg": "invalid credential"}

    with pytest.raises(CredentialError) as exc_info:
        await wechat_api.get_access_token("APPID", "SECRET")

    assert "invalid credential" in str(exc_info.value)
    assert "40001" in str(exc_info.value)
    assert exc_info.value.errcode == 40001
    # 재시도 없음
    assert len(fake_wechat.requests_to("/cgi-bin/token")) == 1


@pytest.mark.asyncio
async def test_get_access_token_missing_token(fake_wechat, wechat_credentials):
    fake_wechat.token_response = {"expires_in": 7200}

    with pytest.raises(CredentialError, match="access_token missing"):
        await wechat_api.get_access_token("APPID", "SECRET")


@pytest.mark.asyncio
async def test_get_access_token_non_utf8_body(fake_wechat, wechat_credentials):
    """UTF-8이 아닌 응답 본문도 CredentialError로 변환."""
    fake_wechat.token_response = httpx.Response(200, content=b"\x80\x81 not json")

    with pytest.raises(CredentialError, match="invalid JSON response"):
        await wechat_api.get_access_token("APPID", "SECRET")


@pytest.mark.asyncio
async def test_get_access_token_network_error(monkeypatch, wechat_credentials):
    """네트워크 오류도 CredentialError로 감싸서 전달."""
    def _raise(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport = httpx.MockTransport(_raise)
    monkeypatch.setattr(wechat_api, "_build_client", lambda: httpx.AsyncClient(transport=transport))

    with pytest.raises(CredentialError, match="token request failed"):
        await wechat_api.get_access_token("APPID", "SECRET")


# ============================================================================
# Media Uploader
# ============================================================================

@pytest.mark.asyncio
async def test_upload_local_image(fake_wechat, wechat_credentials, token, tmp_path):
    """로컬 이미지 업로드.

    Given: 로컬 파일이 존재하고
    When: upload_material을 호출하면
    Then: 파일명은 경로의 마지막 세그먼트, media 필드에 파일 내용이 담겨야 함
    """
    image = tmp_path / "a.jpg"
    image.write_bytes(b"local-jpeg-bytes")

    media_id = await wechat_api.upload_material(token, str(image), "image")

    assert media_id == "MID1"
    uploads = fake_wechat.requests_to("/cgi-bin/material/add_material")
    assert len(uploads) == 1
    request = uploads[0]
    assert request.method == "POST"
    assert request.url.params["access_token"] == "ACCESS_TOKEN"
    assert request.url.params["type"] == "image"
    assert b'name="media"; filename="a.jpg"' in request.content
    assert b"local-jpeg-bytes" in request.content
    assert b'name="description"' not in request.content
    # 로컬 파일은 다운로드하지 않음
    assert fake_wechat.downloads_made() == []


@pytest.mark.asyncio
async def test_upload_remote_image(fake_wechat, wechat_credentials, token):
    """원격 이미지 업로드.

    Given: 원격 URL의 파일을 내려받을 수 있고
    When: upload_material을 호출하면
    Then: 먼저 다운로드한 뒤 URL 경로의 파일명으로 업로드해야 함
    """
    url = "https://x/y/pic.png"
    fake_wechat.downloads[url] = httpx.Response(200, content=b"remote-png-bytes")

    media_id = await wechat_api.upload_material(token, url, "image")

    assert media_id == "MID1"
    assert [str(r.url) for r in fake_wechat.downloads_made()] == [url]
    upload = fake_wechat.requests_to("/cgi-bin/material/add_material")[0]
    assert b'filename="pic.png"' in upload.content
    assert b"remote-png-bytes" in upload.content


@pytest.mark.asyncio
async def test_upload_remote_without_filename_uses_default(fake_wechat, wechat_credentials, token):
    await wechat_api.upload_material(token, "https://cdn.example.com/", "image")

    upload = fake_wechat.requests_to("/cgi-bin/material/add_material")[0]
    assert b'filename="image.jpg"' in upload.content


@pytest.mark.asyncio
@pytest.mark.parametrize("download", [
    httpx.Response(404, text="not found"),
    httpx.Response(200, content=b""),
])
async def test_upload_remote_download_failure(fake_wechat, wechat_credentials, token, download):
    """다운로드 실패(비정상 상태 또는 빈 본문) 시 DownloadError, 업로드는 시도하지 않음."""
    url = "https://x/y/missing.png"
    fake_wechat.downloads[url] = download

    with pytest.raises(DownloadError, match="missing.png"):
        await wechat_api.upload_material(token, url, "image")

    assert fake_wechat.requests_to("/cgi-bin/material/add_material") == []


@pytest.mark.asyncio
async def test_upload_video_with_description(fake_wechat, wechat_credentials, token):
    """비디오 업로드 시 description 필드를 JSON으로 첨부."""
    url = "https://cdn.example.com/clips/"
    description = VideoDescription(title="Demo", introduction="A short clip")

    await wechat_api.upload_material(token, url, "video", description)

    upload = fake_wechat.requests_to("/cgi-bin/material/add_material")[0]
    assert upload.url.params["type"] == "video"
    assert b'filename="video.mp4"' in upload.content
    assert b'name="description"' in upload.content
    assert json.dumps({"title": "Demo", "introduction": "A short clip"}).encode() in upload.content


@pytest.mark.asyncio
async def test_upload_image_ignores_description(fake_wechat, wechat_credentials, token, tmp_path):
    """이미지에는 description이 있어도 첨부하지 않음."""
    image = tmp_path / "b.png"
    image.write_bytes(b"png")

    await wechat_api.upload_material(token, str(image), "image", VideoDescription(title="x"))

    upload = fake_wechat.requests_to("/cgi-bin/material/add_material")[0]
    assert b'name="description"' not in upload.content


@pytest.mark.asyncio
async def test_upload_http_error_includes_status_and_body(fake_wechat, wechat_credentials, token, tmp_path):
    image = tmp_path / "a.jpg"
    image.write_bytes(b"jpeg")
    fake_wechat.material_responses.append(httpx.Response(502, text="bad gateway"))

    with pytest.raises(UploadError) as exc_info:
        await wechat_api.upload_material(token, str(image), "image")

    assert "502" in str(exc_info.value)
    assert "bad gateway" in str(exc_info.value)
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_upload_errcode(fake_wechat, wechat_credentials, token, tmp_path):
    image = tmp_path / "a.jpg"
    image.write_bytes(b"jpeg")
    fake_wechat.material_responses.append({"errcode": 40004, "errmsg": "invalid media type"})

    with pytest.raises(UploadError, match="invalid media type") as exc_info:
        await wechat_api.upload_material(token, str(image), "image")

    assert exc_info.value.errcode == 40004


@pytest.mark.asyncio
async def test_upload_missing_media_id(fake_wechat, wechat_credentials, token, tmp_path):
    image = tmp_path / "a.jpg"
    image.write_bytes(b"jpeg")
    fake_wechat.material_responses.append({"url": "http://mmbiz.qpic.cn/x"})

    with pytest.raises(UploadError, match="media_id missing"):
        await wechat_api.upload_material(token, str(image), "image")


@pytest.mark.asyncio
async def test_upload_missing_local_file(fake_wechat, wechat_credentials, token, tmp_path):
    """읽을 수 없는 로컬 파일은 네트워크 호출 없이 UploadError."""
    missing = tmp_path / "nope.jpg"

    with pytest.raises(UploadError, match="reading local file"):
        await wechat_api.upload_material(token, str(missing), "image")

    assert fake_wechat.requests == []


@pytest.mark.asyncio
async def test_upload_article_image_returns_url(fake_wechat, wechat_credentials, token, tmp_path):
    image = tmp_path / "inline.png"
    image.write_bytes(b"png")

    url = await wechat_api.upload_article_image(token, str(image))

    assert url == "http://mmbiz.qpic.cn/body/1"
    assert len(fake_wechat.requests_to("/cgi-bin/media/uploadimg")) == 1


# ============================================================================
# Draft Composer
# ============================================================================

@pytest.mark.asyncio
async def test_publish_image_message_draft_payload(fake_wechat, wechat_credentials, token):
    """newspic 초안 페이로드 구성.

    Given: 업로드된 media_id 목록이 있고
    When: publish_image_message_draft를 호출하면
    Then: image_list가 입력 순서를 유지하고 댓글 플래그가 0이어야 함
    """
    media_id = await wechat_api.publish_image_message_draft(
        token, "周末", "三张照片", ["MID3", "MID1", "MID2"],
    )

    assert media_id == "DRAFT1"
    request = fake_wechat.requests_to("/cgi-bin/draft/add")[0]
    assert request.url.params["access_token"] == "ACCESS_TOKEN"
    assert request.headers["content-type"] == "application/json"

    payload = fake_wechat.last_draft_payload()
    assert payload == {
        "articles": [
            {
                "article_type": "newspic",
                "title": "周末",
                "content": "三张照片",
                "image_info": {
                    "image_list": [
                        {"image_media_id": "MID3"},
                        {"image_media_id": "MID1"},
                        {"image_media_id": "MID2"},
                    ]
                },
                "need_open_comment": 0,
                "only_fans_can_comment": 0,
            }
        ]
    }
    # 중국어는 이스케이프하지 않고 UTF-8 그대로 전송
    assert "周末".encode("utf-8") in request.content


@pytest.mark.asyncio
async def test_publish_image_message_draft_errcode(fake_wechat, wechat_credentials, token):
    fake_wechat.draft_response = {"errcode": 45166, "errmsg": "invalid content"}

    with pytest.raises(DraftError, match="invalid content"):
        await wechat_api.publish_image_message_draft(token, "t", "c", ["MID1"])


@pytest.mark.asyncio
async def test_publish_image_message_draft_missing_media_id(fake_wechat, wechat_credentials, token):
    fake_wechat.draft_response = {"errcode": 0, "errmsg": "ok"}

    with pytest.raises(DraftError, match="media_id missing"):
        await wechat_api.publish_image_message_draft(token, "t", "c", ["MID1"])


@pytest.mark.asyncio
async def test_publish_news_draft(fake_wechat, wechat_credentials, token):
    media_id = await wechat_api.publish_news_draft(
        token, "Title", "<p>body</p>", "THUMB", digest="summary",
    )

    assert media_id == "DRAFT1"
    article = fake_wechat.last_draft_payload()["articles"][0]
    assert article["thumb_media_id"] == "THUMB"
    assert article["digest"] == "summary"
    assert "author" not in article
    assert "article_type" not in article
