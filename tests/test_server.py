"""Tests for the FastAPI webhook and operator endpoints."""

import inspect
import xml.etree.ElementTree as ET
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from twilio.request_validator import RequestValidator

from restaurant_voice.models import CallDirective, CallTurn, NewOrder, NewReservation
from restaurant_voice.server import (
    app,
    get_orchestrator,
    get_record_store,
    list_orders,
    list_reservations,
)
from restaurant_voice.services.dialog_orchestrator import (
    GREETING_RECORDING,
    DialogOrchestrator,
)


@pytest.fixture
def orchestrator():
    """Orchestrator double returning a hang-up directive."""
    orchestrator = MagicMock(spec=DialogOrchestrator)
    orchestrator.handle_turn = AsyncMock(return_value=CallDirective.hangup("Auf Wiederhören."))
    return orchestrator


@pytest.fixture
def client(orchestrator, record_store, config, monkeypatch):
    """Test client with injected dependencies and a test configuration."""
    monkeypatch.setattr("restaurant_voice.config.config", config)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_record_store] = lambda: record_store
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestVoiceWebhook:
    """Tests for POST /voice."""

    def test_first_turn(self, client, orchestrator):
        """Test that a turn without speech reaches the orchestrator empty."""
        orchestrator.handle_turn.return_value = CallDirective.listen(
            "Guten Tag.", GREETING_RECORDING
        )

        response = client.post("/voice", data={"CallSid": "CA123", "From": "+4930111"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")

        turn: CallTurn = orchestrator.handle_turn.await_args.args[0]
        assert turn.call_id == "CA123"
        assert turn.speech_text == ""
        assert turn.caller == "+4930111"

        root = ET.fromstring(response.text)
        say = root.find("Say")
        record = root.find("Record")
        assert say.text == "Guten Tag."
        assert say.get("language") == "de-DE"
        assert say.get("voice") == "woman"
        assert record.get("playBeep") == "false"
        assert record.get("timeout") == "4"
        assert record.get("maxLength") == "20"
        assert record.get("transcribe") == "true"
        assert record.get("transcribeCallback") == "/transcribe"

    def test_speech_is_trimmed(self, client, orchestrator):
        """Test that the transcribed speech is passed on trimmed."""
        response = client.post(
            "/voice", data={"CallSid": "CA123", "SpeechResult": "  Wann öffnen Sie?  "}
        )

        assert response.status_code == 200
        turn: CallTurn = orchestrator.handle_turn.await_args.args[0]
        assert turn.speech_text == "Wann öffnen Sie?"

        root = ET.fromstring(response.text)
        assert root.find("Say").text == "Auf Wiederhören."
        assert root.find("Hangup") is not None

    def test_missing_call_sid_is_generated(self, client, orchestrator):
        """Test that a missing CallSid gets a local id."""
        client.post("/voice", data={"SpeechResult": "Hallo"})

        turn: CallTurn = orchestrator.handle_turn.await_args.args[0]
        assert turn.call_id

    def test_transfer(self, client, orchestrator):
        """Test rendering of a transfer directive."""
        orchestrator.handle_turn.return_value = CallDirective.transfer(
            "Einen Moment bitte.", "+49301234567"
        )

        response = client.post("/voice", data={"CallSid": "CA1", "SpeechResult": "Hilfe"})

        root = ET.fromstring(response.text)
        assert root.find("Dial").text == "+49301234567"
        assert root.find("Hangup") is None

    def test_orchestrator_not_initialized(self, config, monkeypatch):
        """Test that the webhook answers 503 before startup."""
        monkeypatch.setattr("restaurant_voice.config.config", config)
        app.dependency_overrides.clear()

        response = TestClient(app).post("/voice", data={"CallSid": "CA1"})

        assert response.status_code == 503


class TestSignatureValidation:
    """Tests for Twilio signature verification."""

    @pytest.fixture
    def signing_config(self, config):
        config.twilio_auth_token = "secret-token"
        config.twilio_validate_signature = True
        return config

    @pytest.mark.parametrize("path", ["/voice", "/transcribe", "/transcribe-sms"])
    def test_rejects_unsigned_request(self, client, signing_config, orchestrator, path):
        """Test that unsigned requests get a 403 with an empty body."""
        response = client.post(
            path, data={"CallSid": "CA1"}, headers={"X-Twilio-Signature": "forged"}
        )

        assert response.status_code == 403
        assert response.content == b""
        orchestrator.handle_turn.assert_not_awaited()

    def test_accepts_signed_request(self, client, signing_config):
        """Test that correctly signed requests pass."""
        params = {"CallSid": "CA1", "SpeechResult": "Hallo"}
        signature = RequestValidator("secret-token").compute_signature(
            "http://testserver/voice", params
        )

        response = client.post(
            "/voice", data=params, headers={"X-Twilio-Signature": signature}
        )

        assert response.status_code == 200


class TestCallbacks:
    """Tests for the acknowledged-only callbacks."""

    @pytest.mark.parametrize("path", ["/transcribe", "/transcribe-sms"])
    def test_callbacks_are_accepted(self, client, path, orchestrator):
        """Test that transcription callbacks are accepted and not processed."""
        response = client.post(
            path, data={"CallSid": "CA1", "TranscriptionText": "Ja, bitte"}
        )

        assert response.status_code == 200
        assert response.text == ""
        orchestrator.handle_turn.assert_not_awaited()


class TestAdminEndpoints:
    """Tests for the operator read surface."""

    @pytest.mark.parametrize("endpoint", [list_reservations, list_orders])
    def test_reads_run_in_threadpool(self, endpoint):
        """Test that the blocking store reads are not run on the event loop."""
        assert not inspect.iscoroutinefunction(endpoint)

    def test_list_reservations(self, client, record_store):
        """Test listing reservations newest first."""
        record_store.insert_reservation(NewReservation(name="Anna", party_size=2))
        record_store.insert_reservation(NewReservation(name="Ben", party_size=3))

        response = client.get("/admin/reservations")

        assert response.status_code == 200
        rows = response.json()
        assert [row["name"] for row in rows] == ["Ben", "Anna"]
        assert set(rows[0]) == {
            "id",
            "name",
            "phone",
            "date",
            "time",
            "party_size",
            "notes",
            "created_at",
        }

    def test_list_reservations_limit(self, client, record_store):
        """Test the limit query parameter."""
        for name in ["Anna", "Ben", "Clara"]:
            record_store.insert_reservation(NewReservation(name=name))

        response = client.get("/admin/reservations", params={"limit": 1})

        assert [row["name"] for row in response.json()] == ["Clara"]

    def test_invalid_limit(self, client):
        """Test that out-of-range limits are rejected."""
        assert client.get("/admin/reservations", params={"limit": 0}).status_code == 422

    def test_list_orders(self, client, record_store):
        """Test listing orders with decoded items."""
        record_store.insert_order(
            NewOrder(name="Ben", items=[{"name": "Pizza", "qty": 2}], total=19.5)
        )

        rows = client.get("/admin/orders").json()

        assert rows[0]["items"] == [{"name": "Pizza", "qty": 2}]
        assert rows[0]["total"] == 19.5


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, client):
        """Test the health check."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
