"""Per-turn dialog orchestration for inbound restaurant calls."""

import asyncio
import logging

from restaurant_voice.agents import ReplyAgent, UnderstandingAgent
from restaurant_voice.config import Config, get_config
from restaurant_voice.models import (
    CallDirective,
    CallTurn,
    Intent,
    IntentResult,
    RecordSettings,
    order_from_slots,
    order_reference,
    reservation_from_slots,
)
from restaurant_voice.services.record_store import RecordStore

logger = logging.getLogger(__name__)

GREETING = "Guten Tag. Willkommen beim {restaurant_name}. Wie kann ich Ihnen helfen?"
RESERVATION_CONFIRMATION = (
    "Danke. Ich habe Ihre Reservierung für den {date} um {time} "
    "für {party_size} Personen auf den Namen {name} eingetragen. "
    "Möchten Sie eine Bestätigung per SMS?"
)
HOURS_AND_LOCATION = (
    "Wir sind {opening_hours} geöffnet. Wir befinden uns in der {address}."
)
ORDER_CONFIRMATION = (
    "Danke. Ihre Bestellung wurde aufgenommen. Abholung in {pickup_time}. "
    "Ihre Bestellnummer ist {reference}."
)
APOLOGY_WITH_TRANSFER = (
    "Entschuldigung, es ist ein Fehler aufgetreten. "
    "Ich verbinde Sie mit einem Mitarbeiter."
)
APOLOGY_WITH_HANGUP = (
    "Entschuldigung, es ist ein Fehler aufgetreten. "
    "Bitte rufen Sie uns später noch einmal an."
)

# Spoken in place of a slot the caller did not give
UNSPECIFIED_DATE = "angegebenen Tag"
UNSPECIFIED_TIME = "angegebene Zeit"
UNSPECIFIED_PICKUP_TIME = "kurzer Zeit"

GREETING_RECORDING = RecordSettings(
    timeout=4, max_length=20, transcribe_callback="/transcribe"
)
SMS_CONFIRMATION_RECORDING = RecordSettings(
    timeout=3, max_length=3, transcribe_callback="/transcribe-sms"
)


class DialogOrchestrator:
    """Decides the spoken response and call-control action for one call turn.

    Turns are handled independently: nothing is remembered between turns of
    the same call. The three collaborators are injected so they can be
    replaced in tests.

    Attributes:
        understanding: Classifies utterances into intents and slots
        reply_generator: Produces free-form replies for unrouted intents
        record_store: Persists reservations and orders
        config: Application configuration
        operator_phone: Transfer target for failed turns (None hangs up)
    """

    def __init__(
        self,
        understanding: UnderstandingAgent,
        reply_generator: ReplyAgent,
        record_store: RecordStore,
        config: Config | None = None,
        operator_phone: str | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            understanding: Understanding agent
            reply_generator: Reply agent
            record_store: Record store shared by all turns
            config: Application configuration (defaults to the global config)
            operator_phone: Overrides ``config.agent_phone`` when given
        """
        self.understanding = understanding
        self.reply_generator = reply_generator
        self.record_store = record_store
        self.config = config or get_config()
        self.operator_phone = operator_phone or self.config.agent_phone

    async def handle_turn(self, turn: CallTurn) -> CallDirective:
        """Produce the directive for one call turn.

        Never raises: any failure after the greeting check is turned into an
        apology that transfers to the operator, or hangs up if none is set.

        Args:
            turn: The incoming call turn

        Returns:
            The call-control directive to send back to the telephony provider
        """
        if turn.is_first_utterance:
            logger.info(f"Call {turn.call_id}: greeting caller")
            return CallDirective.listen(
                GREETING.format(restaurant_name=self.config.restaurant_name),
                GREETING_RECORDING,
            )

        try:
            result = await self.understanding.parse_utterance(turn.speech_text.strip())
            logger.info(
                f"Call {turn.call_id}: parsed intent {result.intent.value} "
                f"slots {result.slots}"
            )
            return await self._route(turn, result)
        except Exception:
            logger.exception(f"Call {turn.call_id}: failed to handle turn")
            return self._failure_directive()

    async def _route(self, turn: CallTurn, result: IntentResult) -> CallDirective:
        if result.intent == Intent.RESERVE_TABLE:
            return await self._reserve_table(turn, result)
        elif result.intent == Intent.ASK_HOURS_LOCATION:
            return self._hours_and_location()
        elif result.intent == Intent.ORDER_TAKEAWAY:
            return await self._order_takeaway(turn, result)
        else:
            # change_cancel, feedback and ask_menu have no flow of their own yet
            reply = await self.reply_generator.generate_reply(turn.speech_text.strip())
            return CallDirective.hangup(reply)

    async def _reserve_table(
        self, turn: CallTurn, result: IntentResult
    ) -> CallDirective:
        fields = reservation_from_slots(result.slots)
        reservation_id = await asyncio.to_thread(
            self.record_store.insert_reservation, fields
        )
        logger.info(f"Call {turn.call_id}: reservation {reservation_id} created")

        prompt = RESERVATION_CONFIRMATION.format(
            date=fields.date or UNSPECIFIED_DATE,
            time=fields.time or UNSPECIFIED_TIME,
            party_size=fields.party_size,
            name=fields.name,
        )
        return CallDirective.listen(prompt, SMS_CONFIRMATION_RECORDING)

    def _hours_and_location(self) -> CallDirective:
        return CallDirective.hangup(
            HOURS_AND_LOCATION.format(
                opening_hours=self.config.opening_hours,
                address=self.config.restaurant_address,
            )
        )

    async def _order_takeaway(
        self, turn: CallTurn, result: IntentResult
    ) -> CallDirective:
        fields = order_from_slots(result.slots)
        order_id = await asyncio.to_thread(self.record_store.insert_order, fields)
        logger.info(f"Call {turn.call_id}: order {order_id} created")

        prompt = ORDER_CONFIRMATION.format(
            pickup_time=fields.pickup_time or UNSPECIFIED_PICKUP_TIME,
            reference=order_reference(order_id),
        )
        return CallDirective.hangup(prompt)

    def _failure_directive(self) -> CallDirective:
        if self.operator_phone:
            return CallDirective.transfer(APOLOGY_WITH_TRANSFER, self.operator_phone)
        return CallDirective.hangup(APOLOGY_WITH_HANGUP)
