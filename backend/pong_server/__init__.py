from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
import json
import random
from config import Config

socketio = SocketIO(async_mode=None)


def _cors_origins(config):
    return config.get('ALLOWED_ORIGINS', []) if config.get('IS_PRODUCTION') else '*'


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = _cors_origins(flask_app.config)
    CORS(flask_app, origins=origins)

    socketio.init_app(
        flask_app,
        cors_allowed_origins=origins,
        ping_timeout=flask_app.config.get('SOCKETIO_PING_TIMEOUT', 60),
        ping_interval=flask_app.config.get('SOCKETIO_PING_INTERVAL', 25),
    )

    # One arena per app: the waiting slot and match table live here
    from pong_server.services.pong import Arena
    from pong_server.socketio_events import emit_to_handle, register_socketio_handlers
    testing = flask_app.config.get('TESTING', False)
    flask_app.extensions['pong'] = Arena(
        emit_to_handle,
        tick_interval=float(flask_app.config.get('TICK_INTERVAL_MS', 1000 / 30)) / 1000.0,
        start_task=socketio.start_background_task,
        sleep=socketio.sleep,
        autostart=not testing or bool(flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS')),
        logger=flask_app.logger,
    )

    from pong_server.main import main
    flask_app.register_blueprint(main)

    register_socketio_handlers()

    @click.command('simulate')
    @click.option('--ticks', default=900, show_default=True, help='Nominal ticks to simulate.')
    @click.option('--seed', default=None, type=int, help='Seed for ball resets.')
    @click.option('--track', is_flag=True, help='Move both paddles toward the ball.')
    def simulate_command(ticks, seed, track):
        """Runs one match headless and prints the final state."""
        from pong_server.services.pong.physics import DOWN, UP, advance, new_sim_state

        rng = random.Random(seed)
        state = new_sim_state(rng)
        for _ in range(ticks):
            inputs = None
            if track:
                inputs = {}
                for number in (1, 2):
                    paddle = state.paddle(number)
                    if state.ball.y < paddle.y:
                        inputs[number] = UP
                    elif state.ball.y > paddle.y + paddle.height:
                        inputs[number] = DOWN
            advance(state, 1.0, rng, inputs)
        click.echo(json.dumps(state.to_dict()))

    flask_app.cli.add_command(simulate_command)

    return flask_app
