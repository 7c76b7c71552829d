"""Rendering of call-control directives as Twilio TwiML."""

import logging

from twilio.twiml.voice_response import VoiceResponse

from restaurant_voice.models import CallAction, CallDirective

logger = logging.getLogger(__name__)


def render_twiml(directive: CallDirective, voice: str, language: str) -> str:
    """Render a directive as a TwiML document.

    Args:
        directive: The orchestrator's directive for this turn
        voice: Twilio ``<Say>`` voice
        language: Twilio ``<Say>`` language

    Returns:
        TwiML XML string
    """
    response = VoiceResponse()
    response.say(directive.prompt, voice=voice, language=language)

    if directive.action == CallAction.LISTEN and directive.record is not None:
        record = directive.record
        response.record(
            play_beep=record.play_beep,
            timeout=record.timeout,
            max_length=record.max_length,
            transcribe=record.transcribe,
            transcribe_callback=record.transcribe_callback,
        )
    elif directive.action == CallAction.TRANSFER and directive.transfer_to:
        response.dial(directive.transfer_to)
    else:
        response.hangup()

    return str(response)
