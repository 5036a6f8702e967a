"""Kiosk workflows: funding sessions and profile creation."""

from .profiles import ProfileCreator
from .session import SessionController, SessionState

__all__ = ["ProfileCreator", "SessionController", "SessionState"]
