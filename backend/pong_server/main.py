from flask import Blueprint, current_app, jsonify
from pong_server.services.pong.physics import playfield

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Pong match server!'})

@main.route('/api/status')
def status():
    return jsonify(current_app.extensions['pong'].status())

@main.route('/api/playfield')
def get_playfield():
    """Playfield constants; clients must agree with these for physics to line up."""
    fields = playfield()
    fields['tick_interval_ms'] = float(current_app.config.get('TICK_INTERVAL_MS', fields['tick_interval_ms']))
    return jsonify(fields)
