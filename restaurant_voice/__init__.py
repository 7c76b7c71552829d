"""Telephone voice agent for restaurant reservations and takeaway orders."""

__version__ = "0.1.0"
