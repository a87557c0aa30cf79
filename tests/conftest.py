"""Pytest configuration and fixtures.

이 모듈은 모든 테스트에서 공유되는 pytest fixture들을 정의합니다.

주요 Fixture:
- wechat_credentials: WECHAT_APP_ID / WECHAT_APP_SECRET 설정
- no_wechat_credentials: 자격 증명이 없는 환경
- fake_wechat: WeChat API와 원격 이미지 서버를 흉내내는 httpx.MockTransport
- client: FastAPI 테스트 클라이언트 (직접 툴 실행 엔드포인트 포함)

fake_wechat은 실제 네트워크 호출 없이 모든 요청을 기록하므로
"네트워크 호출이 한 번도 없었다" 같은 검증도 가능합니다.
"""
import json
from typing import Any, Dict, List, Optional, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from wenyan_mcp.adapters import wechat_api
from wenyan_mcp.server.settings import settings


TEST_APP_ID = "wx-test-app-id"
TEST_APP_SECRET = "wx-test-app-secret"

WECHAT_HOST = "api.weixin.qq.com"

CannedResponse = Union[Dict[str, Any], httpx.Response]


class FakeWeChat:
    """In-memory stand-in for the WeChat API and remote file hosts.

    Attributes:
        requests: 처리한 모든 httpx.Request (순서대로)
        token_response: /cgi-bin/token 응답
        material_responses: add_material 응답 큐 (비어 있으면 MID1, MID2 ... 자동 생성)
        uploadimg_responses: uploadimg 응답 큐 (비어 있으면 URL 자동 생성)
        draft_response: /cgi-bin/draft/add 응답
        downloads: 원격 URL → 응답 (등록되지 않은 URL은 이미지 바이트 반환)
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.token_response: CannedResponse = {"access_token": "ACCESS_TOKEN", "expires_in": 7200}
        self.material_responses: List[CannedResponse] = []
        self.uploadimg_responses: List[CannedResponse] = []
        self.draft_response: CannedResponse = {"media_id": "DRAFT1"}
        self.downloads: Dict[str, httpx.Response] = {}
        self._material_count = 0
        self._uploadimg_count = 0

    @staticmethod
    def _respond(canned: CannedResponse) -> httpx.Response:
        if isinstance(canned, httpx.Response):
            return canned
        return httpx.Response(200, json=canned)

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)

        if request.url.host != WECHAT_HOST:
            url = str(request.url)
            if url in self.downloads:
                return self.downloads[url]
            return httpx.Response(200, content=b"\x89PNG fake image bytes")

        path = request.url.path
        if path == "/cgi-bin/token":
            return self._respond(self.token_response)
        if path == "/cgi-bin/material/add_material":
            self._material_count += 1
            if self.material_responses:
                return self._respond(self.material_responses.pop(0))
            return self._respond({"media_id": f"MID{self._material_count}", "url": "http://mmbiz.qpic.cn/m"})
        if path == "/cgi-bin/media/uploadimg":
            self._uploadimg_count += 1
            if self.uploadimg_responses:
                return self._respond(self.uploadimg_responses.pop(0))
            return self._respond({"url": f"http://mmbiz.qpic.cn/body/{self._uploadimg_count}"})
        if path == "/cgi-bin/draft/add":
            return self._respond(self.draft_response)
        return httpx.Response(404, json={"errcode": 404, "errmsg": "not found"})

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == WECHAT_HOST and r.url.path == path]

    def downloads_made(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host != WECHAT_HOST]

    def last_draft_payload(self) -> Optional[Dict[str, Any]]:
        drafts = self.requests_to("/cgi-bin/draft/add")
        if not drafts:
            return None
        return json.loads(drafts[-1].content)


@pytest.fixture
def fake_wechat(monkeypatch):
    """WeChat API 호출을 FakeWeChat으로 대체합니다.

    wechat_api._build_client가 MockTransport를 사용하는 AsyncClient를 반환하도록 패치합니다.
    """
    fake = FakeWeChat()
    transport = httpx.MockTransport(fake.handler)
    monkeypatch.setattr(
        wechat_api,
        "_build_client",
        lambda: httpx.AsyncClient(transport=transport),
    )
    return fake


@pytest.fixture
def wechat_credentials(monkeypatch):
    """WeChat 자격 증명을 설정합니다."""
    monkeypatch.setattr(settings, "WECHAT_APP_ID", TEST_APP_ID)
    monkeypatch.setattr(settings, "WECHAT_APP_SECRET", TEST_APP_SECRET)
    monkeypatch.setattr(settings, "WECHAT_API_BASE_URL", f"https://{WECHAT_HOST}")


@pytest.fixture
def no_wechat_credentials(monkeypatch):
    """WECHAT_APP_ID / WECHAT_APP_SECRET이 없는 환경."""
    monkeypatch.setattr(settings, "WECHAT_APP_ID", None)
    monkeypatch.setattr(settings, "WECHAT_APP_SECRET", None)


@pytest.fixture
def client(monkeypatch):
    """FastAPI 테스트 클라이언트를 생성합니다.

    직접 툴 실행 엔드포인트(ENABLE_DIRECT_TOOLS)를 켠 상태의 앱을 사용합니다.
    """
    from wenyan_mcp.server.main import create_app

    monkeypatch.setattr(settings, "ENABLE_DIRECT_TOOLS", True)
    return TestClient(create_app())
