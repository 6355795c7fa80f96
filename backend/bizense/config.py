from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Managed Postgres behind the BaaS (postgresql+asyncpg://...)
    DATABASE_URL: str
    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None
    # When set, access tokens are verified locally instead of calling the auth API
    SUPABASE_JWT_SECRET: str | None = None
    SUPABASE_JWT_AUDIENCE: str = "authenticated"
    IDENTITY_TIMEOUT_SECONDS: float = 10.0
    BACKEND_PORT: int = 5000
    CORS_ORIGINS: list[str] = ["*"]
    ENV: str = "dev"
    # Upload limits
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB
    MAX_ROWS: int = 100000
    # Scratch directory for uploaded files; removed after each ingestion
    STAGING_DIR: str | None = None
    RECENT_UPLOADS_LIMIT: int = 5
