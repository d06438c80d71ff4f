import base64
import json
from io import BytesIO
from typing import Optional, Tuple

import qrcode

from ticketing.controller.helpers import utcnow


def build_ticket_payload(ticket) -> str:
    return json.dumps({
        "ticketId": ticket.id,
        "ticketNumber": ticket.ticket_number,
        "qrCodeValue": ticket.qr_code,
        "timestamp": utcnow().isoformat(),
    })


def render_qr_base64(payload: str) -> str:
    qr_img = qrcode.make(payload)
    buffered = BytesIO()
    qr_img.save(buffered, format="PNG")
    return base64.b64encode(buffered.getvalue()).decode("utf-8")


def qr_data_url(payload: str) -> str:
    return f"data:image/png;base64,{render_qr_base64(payload)}"


def parse_qr_data(qr_data: str) -> Tuple[Optional[int], Optional[str]]:
    """Accepts either the JSON ticket payload or a bare QR value.

    Returns (ticket id, qr value); the id is None for bare values.
    """
    try:
        payload = json.loads(qr_data)
    except ValueError:
        return None, qr_data.strip()

    if not isinstance(payload, dict):
        return None, qr_data.strip()

    ticket_id = payload.get("ticketId")
    try:
        ticket_id = int(ticket_id) if ticket_id is not None else None
    except (TypeError, ValueError):
        ticket_id = None
    return ticket_id, payload.get("qrCodeValue")
