"""WeChat media and draft models.

WeChat 公众号 API와 주고받는 값 객체들을 정의합니다.
모든 객체는 한 번의 툴 호출 안에서만 생성/사용되며, 호출 간에 공유되지 않습니다.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, SecretStr

MaterialType = Literal["image", "video"]

REMOTE_PREFIXES = ("http://", "https://")

DEFAULT_FILENAMES: Dict[str, str] = {
    "image": "image.jpg",
    "video": "video.mp4",
}


class AccessToken(BaseModel):
    """Short-lived access token issued by the token endpoint.

    토큰 값은 SecretStr로 보관하여 repr/로그에 노출되지 않도록 합니다.
    호출마다 새로 발급받으며 캐시하지 않습니다.

    Attributes:
        value: access_token 문자열
        expires_in: 만료까지 남은 시간(초)
    """
    value: SecretStr
    expires_in: int = 7200

    def reveal(self) -> str:
        """Return the raw token for use as a query parameter."""
        return self.value.get_secret_value()


class LocalSource(BaseModel):
    """Media file read from the local filesystem."""
    kind: Literal["local"] = "local"
    path: str

    def filename(self, material_type: MaterialType) -> str:
        # Windows 경로 구분자도 허용
        name = self.path.replace("\\", "/").rstrip("/").split("/")[-1]
        return name or DEFAULT_FILENAMES[material_type]


class RemoteSource(BaseModel):
    """Media file fetched over HTTP(S) before upload."""
    kind: Literal["remote"] = "remote"
    url: str

    def filename(self, material_type: MaterialType) -> str:
        path = urlsplit(self.url).path
        return path.split("/")[-1] or DEFAULT_FILENAMES[material_type]


MediaSource = Union[LocalSource, RemoteSource]


def classify_source(raw: str) -> MediaSource:
    """Classify an input string as a remote URL or a local path.

    http:// 또는 https:// 로 시작하면 Remote, 그 외에는 모두 Local입니다.
    """
    if raw.startswith(REMOTE_PREFIXES):
        return RemoteSource(url=raw)
    return LocalSource(path=raw)


class VideoDescription(BaseModel):
    """Extra description required by the platform for video materials."""
    title: Optional[str] = None
    introduction: Optional[str] = None

    def to_form_value(self) -> str:
        return json.dumps(self.model_dump(exclude_none=True), ensure_ascii=False)


class UploadedMaterial(BaseModel):
    """Permanent material stored on the platform.

    한 번의 초안 생성 동안만 보관하며, 업로드 순서대로 누적됩니다.
    """
    media_id: str
    material_type: MaterialType = "image"


class ImageMessageDraft(BaseModel):
    """Image-and-text ("newspic") draft.

    image_media_ids의 순서가 곧 公众号에서의 이미지 표시 순서입니다.

    Attributes:
        title: 이미지 메시지 제목
        content: 본문 텍스트
        image_media_ids: 업로드된 영구 소재 media_id 목록 (비어 있으면 안 됨)
    """
    title: str
    content: str
    image_media_ids: List[str] = Field(..., min_length=1)

    def to_article(self) -> Dict[str, Any]:
        return {
            "article_type": "newspic",
            "title": self.title,
            "content": self.content,
            "image_info": {
                "image_list": [
                    {"image_media_id": media_id} for media_id in self.image_media_ids
                ],
            },
            "need_open_comment": 0,
            "only_fans_can_comment": 0,
        }
