class LobbyError(Exception):
    """Rejection that is reported back to the connection that caused it."""

    message = 'Request failed'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidSessionId(LobbyError):
    message = 'Invalid session ID'


class SessionNotFound(LobbyError):
    message = 'Session not found'


class InvalidPlayer(LobbyError):
    message = 'Invalid player'


class InvalidGameType(LobbyError):
    message = 'Unknown game type'
