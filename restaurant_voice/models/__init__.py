"""Data models for the restaurant voice agent."""

from restaurant_voice.models.call import (
    CallAction,
    CallDirective,
    CallTurn,
    RecordSettings,
)
from restaurant_voice.models.intent import Intent, IntentResult
from restaurant_voice.models.records import (
    NewOrder,
    NewReservation,
    Order,
    Reservation,
    order_reference,
)
from restaurant_voice.models.slots import order_from_slots, reservation_from_slots

__all__ = [
    "CallAction",
    "CallDirective",
    "CallTurn",
    "Intent",
    "IntentResult",
    "NewOrder",
    "NewReservation",
    "Order",
    "RecordSettings",
    "Reservation",
    "order_from_slots",
    "order_reference",
    "reservation_from_slots",
]
