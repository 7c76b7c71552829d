"""Services of the restaurant voice agent."""

from restaurant_voice.services.call_control import render_twiml
from restaurant_voice.services.dialog_orchestrator import DialogOrchestrator
from restaurant_voice.services.record_store import RecordStore

__all__ = ["DialogOrchestrator", "RecordStore", "render_twiml"]
