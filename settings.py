from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.endpoints import ENDPOINT_PRESETS, EndpointPreset


class Settings(BaseSettings):
    # Opaque bearer credential. Normally supplied per call by the credential
    # provider; the environment value is only a fallback.
    api_key: str | None = None

    endpoint: Literal["siliconflow", "glm", "volcengine"] = "siliconflow"
    base_url: str | None = None
    model: str | None = None
    timeout_seconds: float | None = None

    temperature: float = 0.7
    max_tokens: int = 1000
    max_attempts: int = 3
    retry_base_delay: float = 1.0

    default_tag: str = "#英语单词"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SCENECARD_",
        env_file_encoding="utf-8",
    )

    @field_validator("temperature")
    @classmethod
    def temperature_in_range(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError("temperature must be between 0.0 and 2.0")
        return v

    @field_validator("max_tokens", "max_attempts")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_tokens and max_attempts must be at least 1")
        return v

    @field_validator("retry_base_delay")
    @classmethod
    def delay_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("retry_base_delay must not be negative")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def timeout_must_be_positive(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("timeout_seconds must be positive")
        return v

    @field_validator("default_tag")
    @classmethod
    def tag_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("default_tag must not be blank")
        return v

    @property
    def preset(self) -> EndpointPreset:
        return ENDPOINT_PRESETS[self.endpoint]

    @property
    def resolved_base_url(self) -> str:
        return self.base_url or self.preset.base_url

    @property
    def resolved_model(self) -> str:
        return self.model or self.preset.model

    @property
    def timeout(self) -> float:
        """Overall deadline for one generation call, in seconds."""
        return self.timeout_seconds or self.preset.timeout_seconds
