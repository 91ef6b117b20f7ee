import random
import threading
import time

import pytest

from pong_server.services.pong.physics import SimState
from pong_server.services.pong.registry import ENDED, RUNNING, Match
from pong_server.services.pong.scheduler import GameLoopScheduler


def _paired(arena):
    arena.seek('A')
    return arena.seek('B')


def test_tick_normalises_to_elapsed_time(arena, clock):
    match = _paired(arena)
    match.state.ball.dx, match.state.ball.dy = 6, 3
    x, y = match.state.ball.x, match.state.ball.y

    clock.advance(arena.scheduler.tick_interval * 2)
    assert arena.scheduler.tick(match) is True
    assert match.state.ball.x == pytest.approx(x + 12)
    assert match.state.ball.y == pytest.approx(y + 6)
    assert match.last_tick == clock.now
    assert match.tick_count == 1


def test_tick_broadcasts_to_both_participants(arena, recorder, clock):
    match = _paired(arena)
    recorder.clear()
    clock.advance(arena.scheduler.tick_interval)
    arena.scheduler.tick(match)
    states_a = recorder.events_for('A', 'gameState')
    states_b = recorder.events_for('B', 'gameState')
    assert len(states_a) == len(states_b) == 1
    assert states_a[0] == match.state.to_dict()
    assert states_a[0] == states_b[0]


def test_no_tick_after_teardown(arena, recorder, clock):
    match = _paired(arena)
    arena.disconnect('B')
    recorder.clear()
    clock.advance(arena.scheduler.tick_interval)
    before = match.state.to_dict()
    assert arena.scheduler.tick(match) is False
    assert recorder.sent == []
    assert match.state.to_dict() == before


def test_broadcast_failure_does_not_stop_tick(clock):
    delivered = []

    def flaky(handle, event, payload=None):
        if handle == 'A':
            raise ConnectionError('gone')
        delivered.append((handle, event))

    scheduler = GameLoopScheduler(flaky, rng=random.Random(3), clock=clock, autostart=False)
    match = Match.create('A', 'B', SimState(), now=clock())
    scheduler.start(match)
    clock.advance(scheduler.tick_interval)
    assert scheduler.tick(match) is True
    assert delivered == [('B', 'gameState')]


def test_background_loop_runs_until_stopped(clock):
    sent = []
    started = []
    sleeps = []

    def inline_task(target, *args):
        started.append(target)
        return 'task-handle'

    def fake_sleep(seconds):
        sleeps.append(seconds)
        clock.advance(scheduler.tick_interval)
        if len(sleeps) == 3:
            scheduler.stop(match)

    scheduler = GameLoopScheduler(
        lambda handle, event, payload=None: sent.append(event),
        rng=random.Random(5),
        clock=clock,
        start_task=inline_task,
        sleep=fake_sleep,
    )
    match = Match.create('A', 'B', SimState(), now=clock())
    scheduler.start(match)
    assert match.status == RUNNING
    assert match.timer == 'task-handle'

    started[0](match)

    assert match.status == ENDED
    assert match.timer is None
    assert match.tick_count == 3
    assert sent.count('gameState') == 6
    assert all(s == pytest.approx(scheduler.tick_interval) for s in sleeps)


def test_autostart_needs_task_runner():
    with pytest.raises(ValueError):
        GameLoopScheduler(lambda *a, **k: None)
    with pytest.raises(ValueError):
        GameLoopScheduler(lambda *a, **k: None, start_task=lambda target, *args: None)


def test_loop_survives_tick_error(clock):
    calls = []

    def fake_sleep(seconds):
        calls.append(seconds)
        if len(calls) == 2:
            scheduler.stop(match)

    scheduler = GameLoopScheduler(
        lambda *a, **k: None, clock=clock, sleep=fake_sleep, autostart=False
    )
    match = Match.create('A', 'B', SimState(), now=clock())
    scheduler.start(match)
    match.state = None  # advance() will blow up

    scheduler._run(match)
    assert len(calls) == 2
    assert match.status == ENDED


def test_concurrent_ticks_and_teardown_never_overlap(arena, recorder):
    """A tick running on another thread always finishes before teardown."""
    match = _paired(arena)
    stop = threading.Event()

    def hammer():
        while not stop.is_set() and arena.scheduler.tick(match):
            pass

    workers = [threading.Thread(target=hammer) for _ in range(4)]
    for worker in workers:
        worker.start()
    time.sleep(0.05)
    arena.disconnect('A')
    stop.set()
    for worker in workers:
        worker.join(timeout=5)

    events = recorder.names_for('B')
    left_at = events.index('opponentLeft')
    assert 'gameState' in events[:left_at]
    assert 'gameState' not in events[left_at + 1:]
    assert arena.scheduler.tick(match) is False
