"""Data models for understood caller utterances."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Intent(str, Enum):
    """Caller goals the understanding step can classify."""

    RESERVE_TABLE = "reserve_table"
    ORDER_TAKEAWAY = "order_takeaway"
    ASK_MENU = "ask_menu"
    ASK_HOURS_LOCATION = "ask_hours_location"
    CHANGE_CANCEL = "change_cancel"
    FEEDBACK = "feedback"
    FALLBACK = "fallback"


class IntentResult(BaseModel):
    """Structured result of understanding one utterance.

    Slots are kept as an open mapping. Defaults for missing slots are
    applied where the slots are used (see ``restaurant_voice.models.slots``).
    """

    model_config = ConfigDict(frozen=True)

    intent: Intent = Field(..., description="Classified caller intent")
    slots: dict[str, Any] = Field(
        default_factory=dict, description="Extracted slot values"
    )
    confidence: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Advisory model confidence"
    )

    @classmethod
    def fallback(cls) -> "IntentResult":
        """Result used whenever an utterance could not be understood."""
        return cls(intent=Intent.FALLBACK, slots={}, confidence=0.0)
