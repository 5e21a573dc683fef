"""Chat client configuration with environment variable loading.

Pydantic-based configuration for the conversation controller.
Targets any OpenAI-compatible chat completions endpoint (LM Studio, vLLM, etc.).
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class ChatConfig(BaseModel):
    """Configuration for the streaming chat controller.

    Attributes:
        api_url: Full URL of the chat completions endpoint.
        model_name: Model identifier sent with every request.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in the reply, -1 for no limit.
        request_timeout: Seconds to wait on connect and on each read.
    """

    model_config = ConfigDict(validate_default=True)

    api_url: str = Field(
        default_factory=lambda: os.getenv(
            "CHAT_API_URL", "http://localhost:1234/v1/chat/completions"
        ),
        description="Chat completions endpoint URL",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("CHAT_MODEL", "google/gemma-3-12b"),
        description="Model to use",
    )
    temperature: float = Field(
        default_factory=lambda: float(os.getenv("CHAT_TEMPERATURE", "0.7")),
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("CHAT_MAX_TOKENS", "-1")),
        ge=-1,
        description="Maximum tokens in generated response (-1 = unbounded)",
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("CHAT_REQUEST_TIMEOUT", "120")),
        gt=0.0,
        description="HTTP timeout in seconds",
    )

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate that the endpoint URL is an http(s) URL."""
        v = v.strip()
        if not v:
            raise ValueError("API URL required. Set CHAT_API_URL in .env")
        if not v.startswith(("http://", "https://")):
            raise ValueError("API URL must start with http:// or https://")
        return v

    @field_validator("model_name")
    @classmethod
    def validate_model_name(cls, v: str) -> str:
        """Validate that a model identifier is provided."""
        if not v or not v.strip():
            raise ValueError("Model name required. Set CHAT_MODEL in .env")
        return v.strip()

    @field_validator("max_tokens")
    @classmethod
    def validate_max_tokens(cls, v: int) -> int:
        """Reject zero; only -1 (unbounded) or a positive limit make sense."""
        if v == 0:
            raise ValueError("max_tokens must be -1 (unbounded) or at least 1")
        return v


def get_chat_config() -> ChatConfig:
    """Create chat configuration from environment.

    Returns:
        Configured ChatConfig instance.

    Raises:
        ValidationError: If an environment value is invalid.
    """
    return ChatConfig()
