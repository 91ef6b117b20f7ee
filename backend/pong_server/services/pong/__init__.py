"""Pong match services: physics, matchmaking and the tick loop.

Pure(ish) domain logic imported by the socket handlers and HTTP routes,
keeping transport concerns separate from the simulation.
"""

from .arena import Arena
from .matchmaker import Matchmaker
from .registry import Match, MatchRegistry
from .scheduler import GameLoopScheduler

__all__ = ['Arena', 'GameLoopScheduler', 'Match', 'MatchRegistry', 'Matchmaker']
