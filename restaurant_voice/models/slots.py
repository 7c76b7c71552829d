"""Slot accessors that apply per-intent defaults at the point of use.

The understanding step hands over slots exactly as the model produced them.
These helpers turn that loose mapping into store payloads, so missing or
oddly typed values are defaulted in one place.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any

from restaurant_voice.models.records import NewOrder, NewReservation

logger = logging.getLogger(__name__)

DEFAULT_GUEST_NAME = "Gast"
DEFAULT_PARTY_SIZE = 1
DEFAULT_ORDER_TOTAL = 0.0

# Largest value an SQLite INTEGER column can hold
MAX_SQLITE_INTEGER = 2**63 - 1


def _slot(slots: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-empty value among ``keys``."""
    for key in keys:
        value = slots.get(key)
        if value is not None and value != "":
            return value
    return None


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _positive_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        logger.debug(f"Ignoring non-numeric slot value {value!r}")
        return default
    return number if 0 < number <= MAX_SQLITE_INTEGER else default


def _non_negative_float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        logger.debug(f"Ignoring non-numeric slot value {value!r}")
        return default
    return number if math.isfinite(number) and number >= 0 else default


def _sequence(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    # A single item the model did not wrap in a list
    return [value]


def reservation_from_slots(slots: Mapping[str, Any]) -> NewReservation:
    """Build reservation fields from ``reserve_table`` slots.

    Args:
        slots: Slots as returned by the understanding step

    Returns:
        NewReservation with ``name`` defaulting to "Gast", ``party_size`` to 1
        and every other field to an empty string
    """
    return NewReservation(
        name=_text(_slot(slots, "name", "customer_name"), DEFAULT_GUEST_NAME),
        phone=_text(_slot(slots, "phone", "phone_number")),
        date=_text(_slot(slots, "date")),
        time=_text(_slot(slots, "time")),
        party_size=_positive_int(
            _slot(slots, "party_size", "partySize"), DEFAULT_PARTY_SIZE
        ),
        notes=_text(_slot(slots, "notes", "special_requests")),
    )


def order_from_slots(slots: Mapping[str, Any]) -> NewOrder:
    """Build order fields from ``order_takeaway`` slots.

    Args:
        slots: Slots as returned by the understanding step

    Returns:
        NewOrder with ``name`` defaulting to "Gast", ``items`` to an empty
        list and ``total`` to 0.0
    """
    return NewOrder(
        name=_text(_slot(slots, "name", "customer_name"), DEFAULT_GUEST_NAME),
        phone=_text(_slot(slots, "phone", "phone_number")),
        items=_sequence(_slot(slots, "items")),
        pickup_time=_text(_slot(slots, "pickup_time", "pickupTime")),
        total=_non_negative_float(_slot(slots, "total"), DEFAULT_ORDER_TOTAL),
    )
