"""Input validation for session ids and player payloads.

All functions here are pure and never raise on bad input; callers decide
how to report a rejection.
"""

import re
from typing import Any, NamedTuple, Optional

MAX_PLAYER_NAME_LENGTH = 30
SESSION_ID_RE = re.compile(r'^[a-f0-9]{8}$')
AVATAR_RE = re.compile(r'^data:image/(jpeg|jpg|png|gif|webp);base64,')
_CONTROL_CHARS_RE = re.compile(r'[\x00-\x1f\x7f]')


class PlayerValidation(NamedTuple):
    valid: bool
    error: Optional[str] = None
    sanitized: Optional[dict] = None


def validate_session_id(session_id: Any) -> bool:
    return isinstance(session_id, str) and SESSION_ID_RE.match(session_id) is not None


def sanitize_player_name(name: Any) -> str:
    """Trim, cap at MAX_PLAYER_NAME_LENGTH and drop ASCII control characters."""
    if not name or not isinstance(name, str):
        return ''
    return _CONTROL_CHARS_RE.sub('', name.strip()[:MAX_PLAYER_NAME_LENGTH])


def validate_avatar(avatar: Any) -> Optional[str]:
    if not avatar or not isinstance(avatar, str):
        return None
    if AVATAR_RE.match(avatar):
        return avatar
    return None


def validate_player(raw: Any) -> PlayerValidation:
    if not isinstance(raw, dict):
        return PlayerValidation(False, 'Invalid player name')
    name = raw.get('name')
    if not isinstance(name, str) or not name.strip():
        return PlayerValidation(False, 'Invalid player name')

    sanitized_name = sanitize_player_name(name)
    if not sanitized_name:
        return PlayerValidation(False, 'Player name is required')

    return PlayerValidation(True, sanitized={
        'name': sanitized_name,
        'avatar': validate_avatar(raw.get('avatar')),
    })
