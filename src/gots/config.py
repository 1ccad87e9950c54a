"""Environment-driven settings used as CLI defaults."""
from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LIVERELOAD_PORT = 8181


class GeneratorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    namespace: str = Field(default="", alias="GOTS_NAMESPACE")
    package: str = Field(default="", alias="GOTS_PACKAGE")  # origin filter prefix
    out: str | None = Field(default=None, alias="GOTS_OUT")


class LiveReloadSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    host: str = Field(default="0.0.0.0", alias="LIVERELOAD_HOST")
    port: int = Field(default=DEFAULT_LIVERELOAD_PORT, alias="LIVERELOAD_PORT")
    watch_folder: str = Field(default=".", alias="LIVERELOAD_WATCH")
    period: float = Field(default=1.0, alias="LIVERELOAD_PERIOD")  # seconds between change checks

    @field_validator("port")
    @classmethod
    def _default_port(cls, value: int) -> int:
        """Non-positive ports fall back to the default."""
        return value if value > 0 else DEFAULT_LIVERELOAD_PORT
