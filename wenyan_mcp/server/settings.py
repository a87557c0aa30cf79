"""Application settings loaded from environment variables."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application configuration settings."""

    # Server Configuration (FastAPI 개발용 브리지)
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # WeChat Official Account (公众号) 자격 증명
    # publish_image_message / publish_article 실행 시에만 필요
    WECHAT_APP_ID: Optional[str] = None
    WECHAT_APP_SECRET: Optional[str] = None
    WECHAT_API_BASE_URL: str = "https://api.weixin.qq.com"
    WECHAT_HTTP_TIMEOUT: float = 30.0

    # Article formatting
    DEFAULT_THEME_ID: str = "default"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Feature Flags
    ENABLE_DIRECT_TOOLS: bool = False  # 개발 환경에서만 직접 툴 실행 엔드포인트 활성화

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
