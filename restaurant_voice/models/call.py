"""Data models for call turns and call-control directives."""

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CallTurn(BaseModel):
    """One request/response exchange delivered by the telephony provider."""

    model_config = ConfigDict(frozen=True)

    call_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Provider call SID, generated locally when missing",
    )
    speech_text: str = Field(default="", description="Transcribed caller speech")
    caller: str | None = Field(None, description="Caller phone number if known")

    @property
    def is_first_utterance(self) -> bool:
        """Whether the caller has not said anything yet."""
        return not self.speech_text.strip()


class CallAction(str, Enum):
    """What the call should do after the prompt has been spoken."""

    LISTEN = "listen"
    HANGUP = "hangup"
    TRANSFER = "transfer"


class RecordSettings(BaseModel):
    """Parameters for recording the caller's next utterance."""

    model_config = ConfigDict(frozen=True)

    play_beep: bool = Field(default=False, description="Play a lead-in tone")
    timeout: int = Field(..., gt=0, description="Seconds of silence that end a take")
    max_length: int = Field(..., gt=0, description="Maximum utterance length in seconds")
    transcribe: bool = Field(default=True, description="Request a transcription")
    transcribe_callback: str = Field(..., description="Path receiving the transcript")


class CallDirective(BaseModel):
    """Instruction for the call-control collaborator for one turn."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(..., description="Text to speak to the caller")
    action: CallAction = Field(..., description="Follow-up after speaking")
    record: RecordSettings | None = Field(
        None, description="Recording parameters when listening"
    )
    transfer_to: str | None = Field(None, description="Number to dial on transfer")

    @classmethod
    def listen(cls, prompt: str, record: RecordSettings) -> "CallDirective":
        return cls(prompt=prompt, action=CallAction.LISTEN, record=record)

    @classmethod
    def hangup(cls, prompt: str) -> "CallDirective":
        return cls(prompt=prompt, action=CallAction.HANGUP)

    @classmethod
    def transfer(cls, prompt: str, number: str) -> "CallDirective":
        return cls(prompt=prompt, action=CallAction.TRANSFER, transfer_to=number)
