"""Ynigo Mart kiosk: profile cards, balance top-ups and new profiles backed by a sheet API."""

__version__ = "0.1.0"
