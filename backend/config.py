import os


def _origins(raw):
    return [o.strip() for o in raw.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Frontend dev servers allowed to talk to the API and the socket
    CORS_ORIGINS = _origins(os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080,http://127.0.0.1:8080',
    ))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Display names are clamped to this many characters
    NAME_MAX_LENGTH = int(os.environ.get('NAME_MAX_LENGTH', '24'))
    # Prefix/suffix rule of the validator only applies from this candidate length on
    AFFIX_MIN_LENGTH = int(os.environ.get('AFFIX_MIN_LENGTH', '4'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
