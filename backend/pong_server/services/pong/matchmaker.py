import logging
import random
import time
from typing import Callable, Optional

from .physics import new_sim_state
from .registry import Match, MatchRegistry, Notify


class Matchmaker:
    """Pairs seekers through the registry's single waiting slot.

    The peer already waiting always becomes player 1 and the new seeker
    player 2.
    """

    def __init__(
        self,
        registry: MatchRegistry,
        scheduler,
        notify: Notify,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        self._registry = registry
        self._scheduler = scheduler
        self._notify = notify
        self._rng = rng or random.Random()
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

    def seek(self, handle: str) -> Optional[Match]:
        """Enqueue ``handle`` or pair it with the waiting peer.

        Returns the new match when a pairing happened.
        """
        registry = self._registry
        with registry.lock:
            peer = registry.waiting
            if peer is None or peer == handle:
                registry.waiting = handle
                self._logger.info(f"[waiting] sid={handle}")
                self._send(handle, 'waiting')
                return None

            registry.waiting = None
            match = Match.create(peer, handle, new_sim_state(self._rng), now=self._clock())
            registry.add(match)
            self._logger.info(f"[match-start] match={match.id} player1={peer} player2={handle}")
            # matchFound goes out before the first gameState; a failed send
            # must not leave the match registered without a running loop
            self._send(peer, 'matchFound', {'gameId': match.id, 'playerNumber': 1})
            self._send(handle, 'matchFound', {'gameId': match.id, 'playerNumber': 2})
            self._scheduler.start(match)
            return match

    def _send(self, handle: str, event: str, payload=None) -> None:
        try:
            if payload is None:
                self._notify(handle, event)
            else:
                self._notify(handle, event, payload)
        except Exception as exc:
            self._logger.warning(f"[emit-error] sid={handle} event={event} error={exc}")

    def cancel(self, handle: str) -> bool:
        with self._registry.lock:
            if self._registry.waiting != handle:
                return False
            self._registry.waiting = None
        self._logger.info(f"[cancel] sid={handle}")
        return True
