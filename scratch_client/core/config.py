from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SCRATCH_API_BASE_URL: str = "https://api.scratch.mit.edu"
    SCRATCH_SITE_BASE_URL: str = "https://scratch.mit.edu"

    # Collection endpoints
    SCRATCH_PAGE_SIZE: int = 40  # 单页记录数 (offset/limit 分页)

    # Login session persistence
    SCRATCH_SESSION_FILE: str = ".scratchSession"
    SCRATCH_USERNAME: str | None = None
    SCRATCH_PASSWORD: str | None = None

    HTTP_TIMEOUT: float = 30.0  # 秒

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
