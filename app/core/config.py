from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from app.core.enums import LogLevel


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: LogLevel = LogLevel.INFO
    GIT_BINARY: str = "git"
    WORKSPACE_DIR: str = "."
    # in-memory budget for non-file multipart parts
    MAX_FORM_MEMORY: int = 5_000_000
    MAX_PATCH_BYTES: int = 20_000_000
    FETCH_TIMEOUT_SECONDS: float = 30.0
    STREAM_CHUNK_SIZE: int = 64 * 1024

    @field_validator("WORKSPACE_DIR")
    def make_absolute(cls, v: str) -> str: # noqa
        return str(Path(v).resolve())

settings = Settings()
