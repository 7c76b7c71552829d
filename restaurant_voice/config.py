"""Configuration management for the restaurant voice agent using Pydantic."""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI Configuration
    openai_api_key: str | None = Field(None, description="OpenAI API key")

    # Agent Configuration
    agent_model: str = Field(
        default="gpt-4o-mini", description="OpenAI model for both language agents"
    )
    understanding_max_tokens: int = Field(
        default=400, gt=0, description="Output budget for intent extraction"
    )
    understanding_temperature: float = Field(
        default=0.1, ge=0.0, le=2.0, description="Sampling temperature for extraction"
    )
    reply_max_tokens: int = Field(
        default=300, gt=0, description="Output budget for fallback replies"
    )
    reply_temperature: float = Field(
        default=0.1, ge=0.0, le=2.0, description="Sampling temperature for replies"
    )
    llm_timeout_seconds: float = Field(
        default=20.0, gt=0, description="Request timeout for the OpenAI HTTP client"
    )
    agent_tracing_enabled: bool = Field(
        default=False, description="Export Agents SDK traces to OpenAI"
    )

    # Storage Configuration
    db_path: str = Field(
        default="data/voice_agent.db", description="SQLite database file"
    )

    # Call Handling Configuration
    agent_phone: str | None = Field(
        None, description="Human operator number for call transfers"
    )
    restaurant_name: str = Field(
        default="Restaurant", description="Restaurant name used in the greeting"
    )
    opening_hours: str = Field(
        default="täglich von 11:30 bis 22:00 Uhr",
        description="Opening hours as spoken to callers",
    )
    restaurant_address: str = Field(
        default="Musterstraße 12, 10115 Berlin",
        description="Restaurant address as spoken to callers",
    )
    tts_voice: str = Field(default="woman", description="Twilio <Say> voice")
    tts_language: str = Field(default="de-DE", description="Twilio <Say> language")

    # Twilio Configuration
    twilio_auth_token: str | None = Field(None, description="Twilio auth token")
    twilio_validate_signature: bool = Field(
        default=False, description="Reject webhooks without a valid Twilio signature"
    )
    public_base_url: str | None = Field(
        None,
        description="Public base URL Twilio calls (e.g., https://abc123.ngrok.io)",
    )

    # Server Configuration
    server_host: str = Field(default="0.0.0.0", description="Server host")
    server_port: int = Field(default=3000, description="Server port")
    server_url: str = Field(
        default="http://localhost:3000",
        description="Server URL for the CLI call simulator",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    def has_openai_config(self) -> bool:
        """Check if the language services can be reached."""
        return bool(self.openai_api_key)

    def model_post_init(self, __context) -> None:
        """Validate configuration after initialization."""
        if not self.openai_api_key:
            logger.warning(
                "OPENAI_API_KEY not set - every utterance will take the fallback path"
            )

        if not self.agent_phone:
            logger.warning("AGENT_PHONE not set - failed turns will hang up")

        if self.twilio_validate_signature and not self.twilio_auth_token:
            logger.warning(
                "TWILIO_VALIDATE_SIGNATURE set without TWILIO_AUTH_TOKEN - "
                "signature verification disabled"
            )


# Global config instance
config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global config
    if config is None:
        config = Config()
    return config


def setup_logging(cfg: Config | None = None) -> None:
    """Configure logging for the application."""
    if cfg is None:
        cfg = get_config()

    log_level = getattr(logging, cfg.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from external libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("twilio").setLevel(logging.WARNING)
