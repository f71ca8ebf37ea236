from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    storage_backend: str = "local"
    storage_local_root: str = "/app/files"
    storage_public_base_url: str = "/files"

    upload_max_file_size: int = Field(default=10 * 1024 * 1024, gt=0)
    upload_allowed_mime_types: list[str] = Field(default_factory=list)
    upload_allowed_extensions: list[str] = Field(default_factory=list)
    upload_naming_strategy: str = "unique"
    upload_root: str = "uploads"
    upload_enable_security: bool = True

    worker_pool_size: int = Field(default=4, gt=0)
    batch_timeout_seconds: float | None = None
