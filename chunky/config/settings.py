"""Environment-based settings for the chunky CLI. Read-only; no business logic."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from CHUNKY_* environment variables (or .env)."""

    model_config = SettingsConfigDict(
        env_prefix="CHUNKY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="WARNING", description="Log level name")

    # Chunk output defaults (overridable per run from the command line)
    words_per_chunk: int = Field(default=1000, ge=1, description="Words written to each chunk file")
    out_dir: str = Field(default="./chunks", min_length=1, description="Directory receiving chunk files")
    file_stem: str = Field(default="chunk", min_length=1, description="Chunk file name stem")
    file_ext: str = Field(default=".txt", pattern=r"^\.[A-Za-z0-9]+$", description="Chunk file extension")
    encoding: str = Field(default="utf-8", description="Text encoding for input decoding and chunk files")
    delimiter_profile: str = Field(default="active", description="Delimiter profile name from static.json")

    # I/O tuning
    read_buffer_size: int = Field(default=64 * 1024, ge=1, description="Bytes read from an input file per fragment")
    write_buffer_size: int = Field(default=64 * 1024, ge=1, description="Characters buffered before awaiting a chunk write")
    max_pending_closes: int = Field(default=4, ge=1, le=256, description="Chunk closes allowed in flight")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance. Use for process lifetime."""
    return Settings()
