"""Data models for persisted reservations and takeaway orders."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NewReservation(BaseModel):
    """Reservation fields supplied by the caller of the record store."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Name for the reservation")
    phone: str = Field(default="", description="Contact phone number")
    date: str = Field(default="", description="Reservation date as spoken")
    time: str = Field(default="", description="Reservation time as spoken")
    party_size: int = Field(default=1, gt=0, description="Number of people")
    notes: str = Field(default="", description="Special requests or notes")


class Reservation(NewReservation):
    """A stored reservation row."""

    id: str = Field(..., description="Store-generated identifier")
    created_at: datetime = Field(..., description="When the row was inserted")


class NewOrder(BaseModel):
    """Takeaway order fields supplied by the caller of the record store."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Name for the order")
    phone: str = Field(default="", description="Contact phone number")
    items: list[Any] = Field(default_factory=list, description="Ordered line items")
    pickup_time: str = Field(default="", description="Pickup time as spoken")
    total: float = Field(default=0.0, ge=0.0, description="Order total")


class Order(NewOrder):
    """A stored takeaway order row."""

    id: str = Field(..., description="Store-generated identifier")
    created_at: datetime = Field(..., description="When the row was inserted")


def order_reference(order_id: str) -> str:
    """Derive the spoken order number from a generated order id."""
    return order_id[:8]
