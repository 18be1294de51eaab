"""Assistant configuration with environment variable loading.

Pydantic-based settings for the OpenAI Assistants API.
Supports OpenAI, OpenAI-compatible base URLs, and Azure OpenAI deployments.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from empleabot.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


def _first_env(*names: str, default: str | None = None) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


class Settings(BaseModel):
    """Configuration for the remote assistant and its threads.

    Attributes:
        api_key: API key for model access.
        base_url: API base URL (None for OpenAI default).
        azure_endpoint: Azure OpenAI endpoint; selects the Azure client when set.
        api_version: Azure OpenAI API version.
        model: Model or Azure deployment name the assistant runs on.
        assistant_id: Identifier of an existing assistant to reconcile.
        run_idle_timeout: Seconds to wait for the next stream event before
            giving up on a run.
    """

    # Environment values go through the same validation as explicit ones
    model_config = ConfigDict(validate_default=True)

    api_key: str = Field(
        default_factory=lambda: _first_env(
            "LLM_API_KEY", "OPENAI_API_KEY", "AZURE_OPENAI_API_KEY", default=""
        ),
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for OpenAI default)",
    )
    azure_endpoint: str | None = Field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_ENDPOINT") or None,
        description="Azure OpenAI endpoint (None for plain OpenAI)",
    )
    api_version: str = Field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_API_VERSION", "2024-05-01-preview"),
        description="Azure OpenAI API version",
    )
    model: str = Field(
        default_factory=lambda: _first_env(
            "LLM_MODEL", "AZURE_OPENAI_DEPLOYMENT_NAME", default="gpt-4o"
        ),
        description="Model to use",
    )
    assistant_id: str | None = Field(
        default_factory=lambda: _first_env("ASSISTANT_ID", "AZURE_OPENAI_ASSISTANT_ID"),
        description="Existing assistant to reconcile (None to create one)",
    )
    run_idle_timeout: float = Field(
        default_factory=lambda: os.getenv("RUN_IDLE_TIMEOUT", "120"),
        gt=0.0,
        description="Seconds to wait for the next stream event",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set LLM_API_KEY, OPENAI_API_KEY or AZURE_OPENAI_API_KEY in .env"
            )
        return v.strip()

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Model required. Set LLM_MODEL or AZURE_OPENAI_DEPLOYMENT_NAME")
        return v.strip()

    @field_validator("assistant_id")
    @classmethod
    def blank_assistant_id_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


def get_settings() -> Settings:
    """Create settings from environment.

    Returns:
        Configured Settings instance.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
