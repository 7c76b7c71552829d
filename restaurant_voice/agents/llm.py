"""Shared OpenAI client construction for the language agents."""

import logging

from agents import OpenAIChatCompletionsModel
from openai import AsyncOpenAI

from restaurant_voice.config import Config

logger = logging.getLogger(__name__)


def build_openai_client(config: Config) -> AsyncOpenAI | None:
    """Create the process-wide OpenAI HTTP client.

    Requests are bounded by ``llm_timeout_seconds`` and never retried, so a
    failed call costs at most one timeout per turn.

    Args:
        config: Application configuration

    Returns:
        Configured client, or None if no API key is set
    """
    if not config.openai_api_key:
        logger.warning("OpenAI client not created - OPENAI_API_KEY missing")
        return None

    return AsyncOpenAI(
        api_key=config.openai_api_key,
        timeout=config.llm_timeout_seconds,
        max_retries=0,
    )


def build_chat_model(
    config: Config, openai_client: AsyncOpenAI | None
) -> OpenAIChatCompletionsModel:
    """Bind the configured model name to the shared client.

    Raises:
        ValueError: If no client is available because the API key is missing
    """
    if openai_client is None:
        msg = "OPENAI_API_KEY is not configured - language service unavailable"
        raise ValueError(msg)

    return OpenAIChatCompletionsModel(
        model=config.agent_model, openai_client=openai_client
    )
