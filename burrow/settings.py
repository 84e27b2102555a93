from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    API_URL: str = "http://localhost:3000/api"   # backend REST root
    REQUEST_TIMEOUT: float = 10.0                 # seconds, per HTTP call

    PAGE_SIZE: int = 9                            # listing grid is 3x3
    NOTIFICATIONS_PAGE_SIZE: int = 15
    DEFAULT_MAX_PRICE: int = 5000                 # slider ceiling until data says otherwise

    TOKEN_FILE: Path = Path.home() / ".burrow" / "token.json"

    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    MAX_SESSIONS: int = 1000                      # in-memory session stores kept, LRU
    LOG_LEVEL: str = "INFO"                       # DEBUG traces every filter transition

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
