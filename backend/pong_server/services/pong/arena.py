import logging
import random
import time
from typing import Any, Callable, Dict, Optional

from .matchmaker import Matchmaker
from .physics import DIRECTIONS, TICK_INTERVAL_MS, move_paddle
from .registry import RUNNING, MatchRegistry, Notify
from .scheduler import GameLoopScheduler


class Arena:
    """Application-owned container for the matchmaking and simulation core.

    Built once per app in ``create_app`` and reached from socket handlers
    through ``current_app.extensions['pong']``.
    """

    def __init__(
        self,
        notify: Notify,
        tick_interval: float = TICK_INTERVAL_MS / 1000.0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        start_task: Optional[Callable] = None,
        sleep: Optional[Callable[[float], None]] = None,
        autostart: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)
        self.scheduler = GameLoopScheduler(
            notify,
            tick_interval=tick_interval,
            rng=self.rng,
            clock=clock,
            start_task=start_task,
            sleep=sleep,
            autostart=autostart,
            logger=self.logger,
        )
        self.registry = MatchRegistry(self.scheduler, notify, logger=self.logger)
        self.matchmaker = Matchmaker(
            self.registry, self.scheduler, notify, rng=self.rng, clock=clock, logger=self.logger
        )

    def seek(self, handle: str):
        with self.registry.lock:
            current = self.registry.match_for(handle)
            if current is not None:
                self.logger.debug(f"[ignored] sid={handle} seek while in match={current.id}")
                return None
            return self.matchmaker.seek(handle)

    def cancel(self, handle: str) -> bool:
        return self.matchmaker.cancel(handle)

    def move_paddle(self, handle: str, match_id: Optional[str], direction: Any) -> bool:
        """Apply one paddle step immediately; misuse is ignored."""
        if direction not in DIRECTIONS:
            self.logger.debug(f"[ignored] sid={handle} paddleMove direction={direction!r}")
            return False
        with self.registry.lock:
            match = self.registry.get(match_id)
            player_number = match.player_number(handle) if match is not None else None
            if player_number is None:
                self.logger.debug(f"[ignored] sid={handle} paddleMove match={match_id}")
                return False
            with match.lock:
                if match.status != RUNNING:
                    return False
                move_paddle(match.state.paddle(player_number), direction)
        return True

    def disconnect(self, handle: str):
        return self.registry.on_disconnect(handle)

    def status(self) -> Dict[str, Any]:
        matches = self.registry.active_matches()
        return {
            'active_matches': len(matches),
            'waiting': self.registry.waiting is not None,
            'tick_interval_ms': round(self.scheduler.tick_interval * 1000, 3),
            'matches': [m.to_dict() for m in matches],
        }

    def shutdown(self) -> None:
        self.registry.shutdown()
