"""Language agents of the restaurant voice agent using OpenAI Agents SDK."""

from restaurant_voice.agents.intent_parser import (
    extract_json_object,
    parse_intent_payload,
)
from restaurant_voice.agents.llm import build_chat_model, build_openai_client
from restaurant_voice.agents.reply_agent import APOLOGY_REPLY, ReplyAgent
from restaurant_voice.agents.understanding_agent import UnderstandingAgent

__all__ = [
    # Classes
    "ReplyAgent",
    "UnderstandingAgent",
    # Constants
    "APOLOGY_REPLY",
    # Utilities
    "build_chat_model",
    "build_openai_client",
    "extract_json_object",
    "parse_intent_payload",
]
