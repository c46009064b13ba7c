from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LlmSettings(BaseSettings):
    """Settings for the chat transport: endpoint, model and delivery mode."""

    model: str = Field(default="ollama_chat:gemma3:12b", alias="STRUCTURED_CHAT_MODEL")
    api_base: str | None = Field(default="http://localhost:11434", alias="STRUCTURED_CHAT_API_BASE")
    api_key: SecretStr | None = Field(default=None, alias="STRUCTURED_CHAT_API_KEY")
    stream: bool = Field(default=False, alias="STRUCTURED_CHAT_STREAM")
    timeout_seconds: float | None = Field(default=None, alias="STRUCTURED_CHAT_TIMEOUT_SECONDS")

    @field_validator("model")
    @classmethod
    def require_model(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("STRUCTURED_CHAT_MODEL must be non-empty")
        return value.strip()

    @field_validator("api_base")
    @classmethod
    def blank_api_base_is_none(cls, value: str | None) -> str | None:
        """An empty api_base lets litellm use the provider's default endpoint."""
        if value is None or not value.strip():
            return None
        return value.strip().rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def require_positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("STRUCTURED_CHAT_TIMEOUT_SECONDS must be positive")
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )
