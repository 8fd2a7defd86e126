from qrgames import socketio
from qrgames.events import OutboundEvent


def sweep_expired_sessions(app, manager, max_age: int) -> list:
    """Delete sessions older than ``max_age`` seconds and tell their rooms."""
    with app.app_context():
        purged = manager.purge_expired_sessions(max_age)
        for session_id in purged:
            socketio.emit(OutboundEvent.SESSION_ENDED, {'sessionId': session_id}, to=session_id)
        if purged:
            app.logger.info(f"[sweep] purged={len(purged)} max_age={max_age}s")
    return purged


def start_expiry_sweeper(app, manager):
    """Start the periodic expiry sweep when SESSION_MAX_AGE_SEC > 0.

    - No-ops in TESTING mode (tests call sweep_expired_sessions directly)
    - Runs as a Socket.IO background task so it cooperates with eventlet/gevent
    """
    max_age = int(app.config.get('SESSION_MAX_AGE_SEC', 0))
    if max_age <= 0 or app.config.get('TESTING'):
        return None
    interval = max(1, int(app.config.get('SESSION_SWEEP_INTERVAL_SEC', 60)))

    def _worker():
        while True:
            socketio.sleep(interval)
            try:
                sweep_expired_sessions(app, manager, max_age)
            except Exception:
                app.logger.exception("[sweep-error] expiry sweep failed; retrying next interval")

    app.logger.info(f"[sweep-set] interval={interval}s max_age={max_age}s")
    return socketio.start_background_task(_worker)
