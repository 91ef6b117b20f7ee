import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Nominal physics tick (ms); ball speeds are expressed per nominal tick
    TICK_INTERVAL_MS = float(os.environ.get('TICK_INTERVAL_MS', str(1000 / 30)))
    # CORS: '*' outside production, otherwise the explicit origin list
    IS_PRODUCTION = os.environ.get('FLASK_ENV', 'development') == 'production'
    ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'ALLOWED_ORIGINS', 'http://localhost:5173,http://localhost:3000'
        ).split(',')
        if origin.strip()
    ]
    # Socket.IO heartbeat (seconds)
    SOCKETIO_PING_TIMEOUT = int(os.environ.get('SOCKETIO_PING_TIMEOUT', '60'))
    SOCKETIO_PING_INTERVAL = int(os.environ.get('SOCKETIO_PING_INTERVAL', '25'))
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Optional: run real tick loops under TESTING
    ENABLE_SCHEDULER_IN_TESTS = os.environ.get('ENABLE_SCHEDULER_IN_TESTS', '') == '1'
