"""Authoritative Pong physics.

Everything here is pure: functions take a SimState (and an explicit
``random.Random`` where a reset can happen) and mutate only that state.
Constants are shared with the browser client and must stay in sync.
"""

import math
import random
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Mapping, Optional

CANVAS_WIDTH = 800
CANVAS_HEIGHT = 600
PADDLE_WIDTH = 10
PADDLE_HEIGHT = 100
PADDLE_MARGIN = 50
BALL_RADIUS = 10
PADDLE_SPEED = 15
BALL_SPEED = 7
MAX_BALL_SPEED = 10
MAX_BOUNCE_ANGLE = math.pi / 3
TICK_INTERVAL_MS = 1000 / 30

UP = 'up'
DOWN = 'down'
DIRECTIONS = (UP, DOWN)


@dataclass
class Ball:
    x: float = CANVAS_WIDTH / 2
    y: float = CANVAS_HEIGHT / 2
    dx: float = BALL_SPEED
    dy: float = BALL_SPEED
    radius: float = BALL_RADIUS


@dataclass
class Paddle:
    x: float
    y: float = CANVAS_HEIGHT / 2 - PADDLE_HEIGHT / 2
    width: float = PADDLE_WIDTH
    height: float = PADDLE_HEIGHT
    score: int = 0

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2


@dataclass
class Score:
    player1: int = 0
    player2: int = 0

    @property
    def total(self) -> int:
        return self.player1 + self.player2


@dataclass
class SimState:
    ball: Ball = field(default_factory=Ball)
    player1: Paddle = field(default_factory=lambda: Paddle(x=PADDLE_MARGIN))
    player2: Paddle = field(
        default_factory=lambda: Paddle(x=CANVAS_WIDTH - PADDLE_MARGIN - PADDLE_WIDTH)
    )
    score: Score = field(default_factory=Score)

    def paddle(self, player_number: int) -> Paddle:
        if player_number == 1:
            return self.player1
        if player_number == 2:
            return self.player2
        raise ValueError(f"no paddle for player {player_number}")

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot in the shape the browser client renders."""
        return {
            'ball': asdict(self.ball),
            'paddles': {
                'player1': asdict(self.player1),
                'player2': asdict(self.player2),
            },
            'score': asdict(self.score),
        }


def random_velocity(rng: random.Random) -> float:
    return (1 if rng.random() > 0.5 else -1) * BALL_SPEED


def new_sim_state(rng: random.Random) -> SimState:
    state = SimState()
    state.ball.dx = random_velocity(rng)
    state.ball.dy = random_velocity(rng)
    return state


def reset_ball(ball: Ball, rng: random.Random) -> None:
    ball.x = CANVAS_WIDTH / 2
    ball.y = CANVAS_HEIGHT / 2
    ball.dx = random_velocity(rng)
    ball.dy = random_velocity(rng)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def move_paddle(paddle: Paddle, direction: str, step: float = PADDLE_SPEED) -> float:
    """Move ``paddle`` one step up or down and return the new y."""
    if direction == UP:
        delta = -step
    elif direction == DOWN:
        delta = step
    else:
        raise ValueError(f"unknown direction {direction!r}")
    paddle.y = _clamp(paddle.y + delta, 0, CANVAS_HEIGHT - paddle.height)
    return paddle.y


def _bounce_off(ball: Ball, paddle: Paddle, away: int) -> None:
    relative_intersect_y = (ball.y - paddle.center_y) / (paddle.height / 2)
    bounce_angle = relative_intersect_y * MAX_BOUNCE_ANGLE
    speed = math.hypot(ball.dx, ball.dy)

    dx = away * speed * math.cos(bounce_angle)
    dy = speed * math.sin(bounce_angle)
    # Scale the whole vector back under the cap so the angle survives
    largest = max(abs(dx), abs(dy))
    if largest > MAX_BALL_SPEED:
        dx *= MAX_BALL_SPEED / largest
        dy *= MAX_BALL_SPEED / largest
    ball.dx = dx
    ball.dy = dy

    # Flush against the face so the next tick does not collide again
    if away < 0:
        ball.x = paddle.x - ball.radius
    else:
        ball.x = paddle.x + paddle.width + ball.radius


def _hits(ball: Ball, paddle: Paddle) -> bool:
    if not (paddle.y <= ball.y <= paddle.y + paddle.height):
        return False
    return ball.x + ball.radius > paddle.x and ball.x - ball.radius < paddle.x + paddle.width


def advance(
    state: SimState,
    delta_ticks: float,
    rng: random.Random,
    inputs: Optional[Mapping[int, Optional[str]]] = None,
) -> Optional[int]:
    """Advance ``state`` by ``delta_ticks`` nominal ticks.

    ``inputs`` maps player number to a direction and is applied before the
    ball moves. Returns the number of the player who scored on this tick,
    or None.
    """
    for player_number, direction in (inputs or {}).items():
        if direction is not None:
            move_paddle(state.paddle(player_number), direction)

    ball = state.ball
    ball.dx = _clamp(ball.dx, -MAX_BALL_SPEED, MAX_BALL_SPEED)
    ball.dy = _clamp(ball.dy, -MAX_BALL_SPEED, MAX_BALL_SPEED)

    ball.x += ball.dx * delta_ticks
    ball.y += ball.dy * delta_ticks

    if ball.y - ball.radius < 0:
        ball.y = ball.radius
        ball.dy = abs(ball.dy)
    elif ball.y + ball.radius > CANVAS_HEIGHT:
        ball.y = CANVAS_HEIGHT - ball.radius
        ball.dy = -abs(ball.dy)

    if _hits(ball, state.player1):
        _bounce_off(ball, state.player1, away=1)
    if _hits(ball, state.player2):
        _bounce_off(ball, state.player2, away=-1)

    scorer = None
    if ball.x - ball.radius < 0:
        scorer = 2
    elif ball.x + ball.radius > CANVAS_WIDTH:
        scorer = 1

    if scorer is not None:
        if scorer == 1:
            state.score.player1 += 1
        else:
            state.score.player2 += 1
        state.paddle(scorer).score += 1
        reset_ball(ball, rng)
    return scorer


def playfield() -> Dict[str, float]:
    return {
        'canvas_width': CANVAS_WIDTH,
        'canvas_height': CANVAS_HEIGHT,
        'paddle_width': PADDLE_WIDTH,
        'paddle_height': PADDLE_HEIGHT,
        'paddle_margin': PADDLE_MARGIN,
        'ball_radius': BALL_RADIUS,
        'paddle_speed': PADDLE_SPEED,
        'ball_speed': BALL_SPEED,
        'max_ball_speed': MAX_BALL_SPEED,
        'tick_interval_ms': TICK_INTERVAL_MS,
    }
