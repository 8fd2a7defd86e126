import base64
import io
import logging
from typing import Optional
from urllib.parse import urlencode

import qrcode
from flask import current_app, request

logger = logging.getLogger(__name__)

JOIN_PAGE = 'join.html'


def build_join_url(base_url: str, session_id: str) -> str:
    return f"{base_url.rstrip('/')}/{JOIN_PAGE}?{urlencode({'session': session_id})}"


def render_qr_data_uri(data: str) -> Optional[str]:
    """Render ``data`` as a PNG QR code data URI, or None if rendering fails."""
    try:
        qr = qrcode.QRCode(border=1, box_size=8)
        qr.add_data(data)
        qr.make(fit=True)
        img = qr.make_image(fill_color='black', back_color='white')
        buffer = io.BytesIO()
        img.save(buffer, format='PNG')
    except (OSError, ValueError) as exc:
        logger.warning(f"[qr-failed] data={data!r} {exc}")
        return None
    encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
    return f"data:image/png;base64,{encoded}"


def join_info(session_id: str) -> dict:
    """Payload announcing a new session: id, join link and its QR code."""
    base_url = current_app.config.get('PUBLIC_BASE_URL') or request.host_url
    join_url = build_join_url(base_url, session_id)
    qr_code = render_qr_data_uri(join_url) if current_app.config.get('QR_CODE_ENABLED', True) else None
    return {'sessionId': session_id, 'joinUrl': join_url, 'qrCode': qr_code}
