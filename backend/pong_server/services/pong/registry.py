import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .physics import SimState

Notify = Callable[..., None]

CREATED = 'created'
RUNNING = 'running'
ENDED = 'ended'


@dataclass
class Match:
    """One live two-player session.

    ``lock`` serialises ticks against control mutations (paddle moves,
    teardown). ``timer`` belongs to the GameLoopScheduler.
    """
    id: str
    player1: str
    player2: str
    state: SimState
    last_tick: float
    started_at: float
    status: str = CREATED
    tick_count: int = 0
    timer: Any = field(default=None, repr=False)
    lock: Any = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def create(cls, player1: str, player2: str, state: SimState, now: float) -> 'Match':
        return cls(
            id=f"{player1}-{player2}",
            player1=player1,
            player2=player2,
            state=state,
            last_tick=now,
            started_at=now,
        )

    @property
    def participants(self) -> Tuple[str, str]:
        return (self.player1, self.player2)

    def player_number(self, handle: str) -> Optional[int]:
        if handle == self.player1:
            return 1
        if handle == self.player2:
            return 2
        return None

    def opponent_of(self, handle: str) -> Optional[str]:
        if handle == self.player1:
            return self.player2
        if handle == self.player2:
            return self.player1
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'player1': self.player1,
            'player2': self.player2,
            'status': self.status,
            'score': {
                'player1': self.state.score.player1,
                'player2': self.state.score.player2,
            },
            'ticks': self.tick_count,
        }


class MatchRegistry:
    """Live matches plus the single waiting slot.

    ``lock`` must be held around any read-decide-write on ``waiting`` or the
    match table. Lock order is registry first, then the match lock.
    """

    def __init__(self, scheduler, notify: Notify, logger: Optional[logging.Logger] = None):
        self.lock = threading.RLock()
        self.waiting: Optional[str] = None
        self._scheduler = scheduler
        self._notify = notify
        self._logger = logger or logging.getLogger(__name__)
        self._matches: Dict[str, Match] = {}
        self._handle_to_match: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._matches)

    def add(self, match: Match) -> None:
        with self.lock:
            self._matches[match.id] = match
            for handle in match.participants:
                self._handle_to_match[handle] = match.id

    def get(self, match_id: Optional[str]) -> Optional[Match]:
        if not match_id:
            return None
        return self._matches.get(match_id)

    def match_for(self, handle: str) -> Optional[Match]:
        with self.lock:
            return self.get(self._handle_to_match.get(handle))

    def active_matches(self) -> List[Match]:
        with self.lock:
            return list(self._matches.values())

    def _remove(self, match: Match) -> None:
        self._matches.pop(match.id, None)
        for handle in match.participants:
            if self._handle_to_match.get(handle) == match.id:
                del self._handle_to_match[handle]

    def on_disconnect(self, handle: str) -> Optional[Match]:
        """Drop every trace of ``handle``; returns the match torn down, if any."""
        with self.lock:
            if self.waiting == handle:
                self.waiting = None
                self._logger.info(f"[waiting-cleared] sid={handle} reason=disconnect")

            match = self.match_for(handle)
            if match is None:
                return None

            self._remove(match)
            self._scheduler.stop(match)
            self._logger.info(
                f"[match-end] match={match.id} reason=disconnect sid={handle} "
                f"score={match.state.score.player1}:{match.state.score.player2}"
            )
            other = match.opponent_of(handle)
            try:
                self._notify(other, 'opponentLeft')
            except Exception as exc:
                self._logger.warning(f"[emit-error] sid={other} event=opponentLeft error={exc}")
            return match

    def shutdown(self) -> None:
        with self.lock:
            for match in list(self._matches.values()):
                self._scheduler.stop(match)
                self._logger.info(f"[match-end] match={match.id} reason=shutdown")
            self._matches.clear()
            self._handle_to_match.clear()
            self.waiting = None
