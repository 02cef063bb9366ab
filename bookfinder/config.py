from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOOKFINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = "https://www.googleapis.com/books/v1/volumes"
    max_results: int = 40
    # No timeout by default: the transport's own behavior applies.
    request_timeout: float | None = None
    user_agent: str = "bookfinder/0.1.0"

    # Quiet interval for search-as-you-type, in seconds.
    debounce_seconds: float = 0.5

    database_path: str = "books_database.db"
    preferences_path: str = "preferences.json"

    # "auto" picks the web variant under Pyodide or when sqlite3 is missing.
    platform: Literal["auto", "native", "web"] = "auto"

    placeholder_buckets: int = 100

    log_level: str = "INFO"


settings = Settings()
