import logging
import random
import time
from typing import Callable, Optional

from .physics import TICK_INTERVAL_MS, advance
from .registry import ENDED, RUNNING, Match, Notify


class GameLoopScheduler:
    """Runs one background tick loop per running match.

    - ``start`` marks the match running and spawns its loop through
      ``start_task`` (``socketio.start_background_task`` in the app)
    - ``stop`` marks it ended under the match lock; no tick body runs after
    - each tick normalises physics to elapsed wall time and broadcasts the
      snapshot to both participants as ``gameState``

    With ``autostart`` off no loop is spawned and ticks are driven by hand.
    """

    def __init__(
        self,
        broadcast: Notify,
        tick_interval: float = TICK_INTERVAL_MS / 1000.0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        start_task: Optional[Callable] = None,
        sleep: Optional[Callable[[float], None]] = None,
        autostart: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        if autostart and (start_task is None or sleep is None):
            raise ValueError('start_task and sleep are required when autostart is on')
        self.tick_interval = tick_interval
        self._broadcast = broadcast
        self._rng = rng or random.Random()
        self._clock = clock
        self._start_task = start_task
        self._sleep = sleep
        self._autostart = autostart
        self._logger = logger or logging.getLogger(__name__)

    def start(self, match: Match) -> None:
        with match.lock:
            match.status = RUNNING
            match.last_tick = self._clock()
        if self._autostart:
            match.timer = self._start_task(self._run, match)

    def stop(self, match: Match) -> None:
        with match.lock:
            match.status = ENDED
            match.timer = None

    def tick(self, match: Match, now: Optional[float] = None) -> bool:
        """Run one tick; returns False once the match has ended."""
        with match.lock:
            if match.status != RUNNING:
                return False
            if now is None:
                now = self._clock()
            delta_ticks = (now - match.last_tick) / self.tick_interval
            match.last_tick = now

            scorer = advance(match.state, delta_ticks, self._rng)
            match.tick_count += 1
            if scorer is not None:
                score = match.state.score
                self._logger.debug(
                    f"[score] match={match.id} player={scorer} score={score.player1}:{score.player2}"
                )

            snapshot = match.state.to_dict()
            for handle in match.participants:
                try:
                    self._broadcast(handle, 'gameState', snapshot)
                except Exception as exc:
                    self._logger.warning(f"[emit-error] match={match.id} sid={handle} error={exc}")
            return True

    def _run(self, match: Match) -> None:
        self._logger.info(f"[loop-start] match={match.id} interval={self.tick_interval:.4f}s")
        while True:
            started = self._clock()
            try:
                if not self.tick(match):
                    break
            except Exception:
                self._logger.exception(f"[tick-error] match={match.id}")
            remaining = self.tick_interval - (self._clock() - started)
            self._sleep(max(0.0, remaining))
        self._logger.info(f"[loop-stop] match={match.id} ticks={match.tick_count}")
