"""Reply agent producing spoken fallback answers using OpenAI Agents SDK."""

import logging

from agents import Agent, ModelSettings, Runner
from openai import AsyncOpenAI

from restaurant_voice.agents.llm import build_chat_model
from restaurant_voice.config import Config, get_config
from restaurant_voice.prompts import load_prompt

logger = logging.getLogger(__name__)

APOLOGY_REPLY = (
    "Entschuldigung, gerade ist ein Fehler aufgetreten. "
    "Ich verbinde Sie mit unserem Personal."
)


class ReplyAgent:
    """Generates a short German telephone answer for utterances without a dedicated flow."""

    def __init__(
        self, openai_client: AsyncOpenAI | None, config: Config | None = None
    ) -> None:
        self.openai_client = openai_client
        self.config = config or get_config()
        self._agent: Agent | None = None

    def create(self) -> Agent:
        """Create and return the configured reply agent.

        Raises:
            ValueError: If the OpenAI API key is not configured
        """
        if self._agent is None:
            instructions = load_prompt(
                "reply_agent",
                restaurant_name=self.config.restaurant_name,
                opening_hours=self.config.opening_hours,
                restaurant_address=self.config.restaurant_address,
            )

            self._agent = Agent(
                name="Reply Agent",
                model=build_chat_model(self.config, self.openai_client),
                instructions=instructions,
                model_settings=ModelSettings(
                    temperature=self.config.reply_temperature,
                    max_tokens=self.config.reply_max_tokens,
                ),
            )
            logger.info("Reply agent created successfully")

        return self._agent

    @property
    def agent(self) -> Agent:
        """Get the agent instance (creates it if needed)."""
        return self.create()

    async def generate_reply(self, context: str) -> str:
        """Answer the caller's utterance.

        Args:
            context: The caller's utterance

        Returns:
            The reply text, or ``APOLOGY_REPLY`` if no usable reply was produced
        """
        try:
            runner = Runner()
            result = await runner.run(starting_agent=self.agent, input=context)
        except Exception:
            logger.exception("Reply service call failed")
            return APOLOGY_REPLY

        reply = result.final_output
        if not isinstance(reply, str) or not reply.strip():
            logger.error(f"Reply service returned no usable text: {reply!r}")
            return APOLOGY_REPLY

        return reply.strip()
