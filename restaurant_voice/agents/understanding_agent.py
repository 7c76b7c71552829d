"""Understanding agent that classifies caller utterances using OpenAI Agents SDK."""

import logging

from agents import Agent, ModelSettings, Runner
from openai import AsyncOpenAI

from restaurant_voice.agents.intent_parser import parse_intent_payload
from restaurant_voice.agents.llm import build_chat_model
from restaurant_voice.config import Config, get_config
from restaurant_voice.models import Intent, IntentResult
from restaurant_voice.prompts import load_prompt

logger = logging.getLogger(__name__)


class UnderstandingAgent:
    """Turns one transcribed utterance into an intent, slots and confidence.

    The agent never raises to its caller. Service failures, a missing API key
    and unparseable output all produce ``IntentResult.fallback()``; the cause
    is only logged.

    Attributes:
        openai_client: Shared OpenAI client (None when no API key is set)
        config: Application configuration
        _agent: The underlying Agent instance (created lazily)
    """

    def __init__(
        self, openai_client: AsyncOpenAI | None, config: Config | None = None
    ) -> None:
        """Initialize the understanding agent.

        Args:
            openai_client: Shared OpenAI client
            config: Application configuration (defaults to the global config)
        """
        self.openai_client = openai_client
        self.config = config or get_config()
        self._agent: Agent | None = None

    def create(self) -> Agent:
        """Create and return the configured understanding agent.

        Raises:
            ValueError: If the OpenAI API key is not configured
        """
        if self._agent is None:
            instructions = load_prompt(
                "understanding_agent",
                restaurant_name=self.config.restaurant_name,
                intents=", ".join(intent.value for intent in Intent),
            )

            self._agent = Agent(
                name="Understanding Agent",
                model=build_chat_model(self.config, self.openai_client),
                instructions=instructions,
                model_settings=ModelSettings(
                    temperature=self.config.understanding_temperature,
                    max_tokens=self.config.understanding_max_tokens,
                ),
            )
            logger.info("Understanding agent created successfully")

        return self._agent

    @property
    def agent(self) -> Agent:
        """Get the agent instance (creates it if needed)."""
        return self.create()

    async def parse_utterance(self, text: str) -> IntentResult:
        """Classify a caller utterance.

        Args:
            text: Transcribed caller speech

        Returns:
            A well-formed IntentResult; the fallback result on any failure
        """
        try:
            runner = Runner()
            result = await runner.run(starting_agent=self.agent, input=text)
            output = result.final_output
            return parse_intent_payload(output if isinstance(output, str) else None)
        except Exception:
            logger.exception("Understanding service call failed")
            return IntentResult.fallback()
