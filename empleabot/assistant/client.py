"""OpenAI client factory."""

import logging

from openai import AsyncAzureOpenAI, AsyncOpenAI

from empleabot.assistant.config import Settings

logger = logging.getLogger(__name__)


def create_client(settings: Settings) -> AsyncOpenAI:
    """Build an async client for the configured provider.

    Uses Azure OpenAI when an endpoint is configured, otherwise OpenAI or the
    OpenAI-compatible API at ``base_url``.
    """
    if settings.azure_endpoint:
        logger.info(f"Using Azure OpenAI endpoint {settings.azure_endpoint}")
        return AsyncAzureOpenAI(
            api_key=settings.api_key,
            azure_endpoint=settings.azure_endpoint,
            api_version=settings.api_version,
        )

    return AsyncOpenAI(api_key=settings.api_key, base_url=settings.base_url)
