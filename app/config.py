from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./app.db"

    # JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    # Asset store: folder for uploaded video files (empty = backend/uploads/videos)
    video_upload_dir: str = ""

    # Prefix for public asset URLs (CDN or static mount in front of video_upload_dir)
    asset_public_base_url: str = "/media/videos"

    # Reject uploads larger than this (bytes)
    max_upload_bytes: int = 200 * 1024 * 1024  # 200 MiB

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
