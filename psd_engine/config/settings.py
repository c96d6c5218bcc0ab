# psd_engine/config/settings.py
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # API
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "PSD Template Engine"

    # CORS
    ALLOWED_HOSTS: List[str] = ["*"]

    # Auth
    BASIC_AUTH_USERNAME: str = "admin"
    BASIC_AUTH_PASSWORD: str = "secret"

    # Template conventions
    TEMPLATE_GROUP_NAME: str = "!!TEMPLATE"
    TEMPLATE_PREFIX: str = "!!"
    STRICT_CONTAINER_BOUNDS: bool = False

    # Preview rendering
    PREVIEW_FORMAT: str = "png"
    JPEG_QUALITY: int = 88
    PREVIEW_BACKGROUND: Optional[str] = None
    MAX_PREVIEW_SIDE: int = 8192

    # Source loading / request handling
    REQUEST_TIMEOUT: int = 30
    ENDPOINT_TIMEOUT_SECONDS: int = 55
    MAX_WORKERS: int = 4

    # Env
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
