import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Session storage: 'memory' or 'redis' (falls back to memory if redis is unreachable)
    STORAGE_TYPE = os.environ.get('STORAGE_TYPE', 'memory')
    REDIS_URL = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    REDIS_KEY_PREFIX = os.environ.get('REDIS_KEY_PREFIX', 'session:')
    REDIS_SOCKET_TIMEOUT_SEC = float(os.environ.get('REDIS_SOCKET_TIMEOUT_SEC', '2'))
    # Upper bound on waiting for a per-session lock before proceeding unserialized
    STORE_LOCK_TIMEOUT_SEC = float(os.environ.get('STORE_LOCK_TIMEOUT_SEC', '5'))
    # Base for join links; empty means the host the request came in on
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', '')
    QR_CODE_ENABLED = os.environ.get('QR_CODE_ENABLED', '1') not in ('0', 'false', 'False')
    # Optional JSON file with [{"text", "options", "correctAnswer"}, ...]
    QUESTION_BANK_PATH = os.environ.get('QUESTION_BANK_PATH') or None
    # Session expiry sweep (seconds). 0 keeps sessions until the process exits.
    SESSION_MAX_AGE_SEC = int(os.environ.get('SESSION_MAX_AGE_SEC', '0'))
    SESSION_SWEEP_INTERVAL_SEC = int(os.environ.get('SESSION_SWEEP_INTERVAL_SEC', '60'))
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
