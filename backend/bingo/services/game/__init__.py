"""Bingo session domain services.

Ticket store, draw pool, progress projection and the session controller.
HTTP routes and socket handlers go through ``GameSession``, keeping
transport concerns separated from game mechanics.
"""
from .controller import GameSession

__all__ = ['GameSession']
