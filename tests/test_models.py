"""Tests for data models and slot accessors."""

import pytest
from pydantic import ValidationError

from restaurant_voice.models import (
    CallAction,
    CallDirective,
    CallTurn,
    Intent,
    IntentResult,
    NewOrder,
    NewReservation,
    RecordSettings,
    order_from_slots,
    order_reference,
    reservation_from_slots,
)


class TestIntentResult:
    """Tests for the IntentResult model."""

    def test_fallback(self):
        """Test the fallback result."""
        result = IntentResult.fallback()

        assert result.intent == Intent.FALLBACK
        assert result.slots == {}
        assert result.confidence == 0.0

    def test_rejects_unknown_intent(self):
        """Test that intents outside the enumerated set are rejected."""
        with pytest.raises(ValidationError):
            IntentResult(intent="book_spaceship")

    def test_rejects_confidence_out_of_range(self):
        """Test that confidence must lie in [0, 1]."""
        with pytest.raises(ValidationError):
            IntentResult(intent=Intent.FEEDBACK, confidence=1.5)

    def test_intent_values(self):
        """Test that all expected intent values exist."""
        assert {intent.value for intent in Intent} == {
            "reserve_table",
            "order_takeaway",
            "ask_menu",
            "ask_hours_location",
            "change_cancel",
            "feedback",
            "fallback",
        }


class TestCallTurn:
    """Tests for the CallTurn model."""

    def test_generates_call_id(self):
        """Test that a missing call id is generated per turn."""
        first = CallTurn(speech_text="Hallo")
        second = CallTurn(speech_text="Hallo")

        assert first.call_id
        assert first.call_id != second.call_id

    def test_first_utterance(self):
        """Test detection of the silent first turn."""
        assert CallTurn(call_id="CA1").is_first_utterance
        assert CallTurn(call_id="CA1", speech_text="   ").is_first_utterance
        assert not CallTurn(call_id="CA1", speech_text="Hallo").is_first_utterance


class TestCallDirective:
    """Tests for the CallDirective model."""

    def test_listen(self):
        """Test creating a listen directive."""
        record = RecordSettings(timeout=4, max_length=20, transcribe_callback="/transcribe")
        directive = CallDirective.listen("Hallo", record)

        assert directive.action == CallAction.LISTEN
        assert directive.record.play_beep is False
        assert directive.record.transcribe is True

    def test_transfer(self):
        """Test creating a transfer directive."""
        directive = CallDirective.transfer("Moment bitte", "+49301234567")

        assert directive.action == CallAction.TRANSFER
        assert directive.transfer_to == "+49301234567"
        assert directive.record is None


class TestRecordModels:
    """Tests for the reservation and order payloads."""

    def test_party_size_must_be_positive(self):
        """Test that party size must be greater than zero."""
        with pytest.raises(ValidationError):
            NewReservation(name="Anna", party_size=0)

    def test_total_must_not_be_negative(self):
        """Test that order totals cannot be negative."""
        with pytest.raises(ValidationError):
            NewOrder(name="Anna", total=-1.0)

    def test_order_reference(self):
        """Test that the order reference is the id prefix."""
        assert order_reference("1234abcd-5678-90ef") == "1234abcd"


class TestReservationSlots:
    """Tests for reservation_from_slots."""

    def test_full_slots(self):
        """Test that given slots are used verbatim."""
        fields = reservation_from_slots(
            {"name": "Anna", "date": "2024-05-01", "time": "19:00", "party_size": 4}
        )

        assert fields.name == "Anna"
        assert fields.date == "2024-05-01"
        assert fields.time == "19:00"
        assert fields.party_size == 4
        assert fields.notes == ""
        assert fields.phone == ""

    def test_empty_slots(self):
        """Test the defaults for an empty slot mapping."""
        fields = reservation_from_slots({})

        assert fields.name == "Gast"
        assert fields.party_size == 1
        assert fields.date == ""
        assert fields.time == ""

    def test_party_size_coercion(self):
        """Test coercion of loosely typed party sizes."""
        assert reservation_from_slots({"party_size": "3"}).party_size == 3
        assert reservation_from_slots({"party_size": 2.0}).party_size == 2
        assert reservation_from_slots({"partySize": 5}).party_size == 5
        assert reservation_from_slots({"party_size": "vier"}).party_size == 1
        assert reservation_from_slots({"party_size": -2}).party_size == 1
        assert reservation_from_slots({"party_size": True}).party_size == 1

    @pytest.mark.parametrize("party_size", [1e999, float("nan"), "1e30", 10**400, 2**63])
    def test_party_size_out_of_range_defaults(self, party_size):
        """Test that infinite or oversized party sizes default to 1."""
        assert reservation_from_slots({"party_size": party_size}).party_size == 1

    def test_oversized_party_size_is_still_written(self, record_store):
        """Test that an oversized party size never prevents the write."""
        reservation_id = record_store.insert_reservation(
            reservation_from_slots({"name": "Anna", "party_size": "1e30"})
        )

        [reservation] = record_store.list_recent_reservations()
        assert reservation.id == reservation_id
        assert reservation.party_size == 1

    def test_blank_name_defaults(self):
        """Test that an empty name falls back to the guest name."""
        assert reservation_from_slots({"name": ""}).name == "Gast"


class TestOrderSlots:
    """Tests for order_from_slots."""

    def test_full_slots(self):
        """Test that given slots are used."""
        fields = order_from_slots(
            {
                "name": "Ben",
                "items": [{"name": "Pizza", "qty": 2}],
                "pickup_time": "18:30",
                "total": 19.5,
            }
        )

        assert fields.name == "Ben"
        assert fields.items == [{"name": "Pizza", "qty": 2}]
        assert fields.pickup_time == "18:30"
        assert fields.total == 19.5

    def test_empty_slots(self):
        """Test the defaults for an empty slot mapping."""
        fields = order_from_slots({})

        assert fields.name == "Gast"
        assert fields.items == []
        assert fields.total == 0.0
        assert fields.pickup_time == ""

    def test_scalar_item_is_wrapped(self):
        """Test that a single unwrapped item becomes a one-element list."""
        assert order_from_slots({"items": "Pizza"}).items == ["Pizza"]

    def test_invalid_total_defaults(self):
        """Test that unusable totals become 0.0."""
        assert order_from_slots({"total": "gratis"}).total == 0.0
        assert order_from_slots({"total": -5}).total == 0.0
        assert order_from_slots({"total": "12.5"}).total == 12.5

    @pytest.mark.parametrize("total", [1e999, float("nan"), 10**400])
    def test_non_finite_total_defaults(self, total):
        """Test that infinite or unrepresentable totals become 0.0."""
        assert order_from_slots({"total": total}).total == 0.0
