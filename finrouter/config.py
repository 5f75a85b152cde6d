from typing import Annotated, Optional, Tuple

import dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# SDK clients and the LangChain integrations also read keys from os.environ
dotenv.load_dotenv()


class Settings(BaseSettings):
    """
    Process-wide configuration, read once at startup and never mutated.

    Missing API keys are allowed here; the provider that needs one fails with
    an authentication error on first use instead.
    """
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    google_api_key: Optional[str] = None

    host: str = Field("127.0.0.1", validation_alias="FINROUTER_HOST")
    port: int = Field(8000, validation_alias="FINROUTER_PORT")
    log_level: str = Field("INFO", validation_alias="FINROUTER_LOG_LEVEL")
    cors_origins: Annotated[Tuple[str, ...], NoDecode] = Field(
        ("*",), validation_alias="FINROUTER_CORS_ORIGINS"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("anthropic_api_key", "openai_api_key", "google_api_key", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper() if isinstance(value, str) else value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        # Comma-separated in the environment
        if isinstance(value, str):
            value = tuple(origin.strip() for origin in value.split(",") if origin.strip())
        return value or ("*",)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the environment (and a ``.env`` file, if present).

        Reads ANTHROPIC_API_KEY, OPENAI_API_KEY, GOOGLE_API_KEY and the
        FINROUTER_* server options.

        Raises:
            pydantic.ValidationError: If an option has the wrong type, e.g. a
                non-numeric FINROUTER_PORT.
        """
        return cls()
