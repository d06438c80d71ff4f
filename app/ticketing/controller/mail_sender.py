import asyncio
import base64
import html as html_lib
import smtplib
from email.mime.image import MIMEImage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

from ticketing import constant_file
from ticketing.constant_file import (email_verification_subject,
                                     password_reset_subject,
                                     refund_subject,
                                     ticket_subject)
from ticketing.controller.helpers import format_amount
from ticketing.errors import MailDeliveryError
from ticketing.logger import get_logger

logger = get_logger(__name__)


def _build_message(to: str, subject: str, text: str, html: Optional[str] = None,
                   qr_png: Optional[bytes] = None, qr_name: str = "ticket.png"):
    message = MIMEMultipart("related")
    message["From"] = formataddr((constant_file.mail_sender_name, constant_file.smtp_email))
    message["To"] = to
    message["Subject"] = subject

    alt = MIMEMultipart("alternative")
    alt.attach(MIMEText(text, "plain"))
    if html:
        alt.attach(MIMEText(html, "html"))
    message.attach(alt)

    if qr_png:
        img = MIMEImage(qr_png, name=qr_name)
        img.add_header("Content-ID", "<qrimage>")
        img.add_header("Content-Disposition", "inline", filename=qr_name)
        message.attach(img)
    return message


# ------------------ Send ------------------
async def send_email(to: str, subject: str, text: str, html: Optional[str] = None,
                     qr_png: Optional[bytes] = None) -> bool:
    """Delivers one message. Returns False when no SMTP host is configured."""
    if not constant_file.smtp_host:
        logger.info("SMTP_HOST not set, skipping mail '%s' to %s", subject, to)
        return False

    message = _build_message(to, subject, text, html, qr_png)

    def send_blocking_email():
        server = smtplib.SMTP(constant_file.smtp_host, constant_file.smtp_port, timeout=30)
        try:
            server.starttls()
            if constant_file.smtp_password:
                server.login(constant_file.smtp_email, constant_file.smtp_password)
            server.sendmail(constant_file.smtp_email, to, message.as_string())
        finally:
            server.quit()

    try:
        await asyncio.to_thread(send_blocking_email)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("SMTP error while sending '%s' to %s: %s", subject, to, e)
        raise MailDeliveryError(str(e)) from e

    logger.info("Mail '%s' sent to %s", subject, to)
    return True


# ------------------ Account mails ------------------
async def send_verification_email(email: str, verification_url: str):
    text = (
        "You are receiving this email because you need to confirm your email address. "
        f"Please make a GET request to: \n\n {verification_url}"
    )
    return await send_email(email, email_verification_subject, text)


async def send_password_reset_email(email: str, reset_url: str):
    text = (
        "You are receiving this email because you (or someone else) has requested the reset "
        f"of a password. Please make a PUT request to: \n\n {reset_url}"
    )
    return await send_email(email, password_reset_subject, text)


# ------------------ Ticket mails ------------------
async def send_ticket_email(email: str, user_name: str, ticket_number: str, event_titles: list,
                            total_amount: float, qr_base64: str):
    events = ", ".join(event_titles)
    text = (
        f"Hi {user_name},\n\nThank you for your purchase. Your ticket {ticket_number} "
        f"covers: {events}.\nAmount paid: {format_amount(total_amount)}.\n\n"
        "Please show the attached QR code at the event entrance."
    )
    html = f"""
    <html>
    <body style="font-family: Arial, sans-serif;">
        <h2>Ticket {ticket_number}</h2>
        <p>Hi <b>{html_lib.escape(user_name)}</b>,</p>
        <p>Your ticket covers: <b>{html_lib.escape(events)}</b></p>
        <p>Amount paid: {format_amount(total_amount)}</p>
        <img src="cid:qrimage" alt="QR Code {ticket_number}" width="200" height="200"/>
        <p>Please show this ticket at the event entrance.</p>
    </body>
    </html>
    """
    qr_png = base64.b64decode(qr_base64) if qr_base64 else None
    return await send_email(email, f"{ticket_subject} - {ticket_number}", text, html, qr_png)


async def send_refund_email(email: str, user_name: str, ticket_number: str, amount: float,
                            refund_id: str):
    text = (
        f"Hi {user_name},\n\nYour ticket {ticket_number} has been refunded.\n"
        f"Refund amount: {format_amount(amount)}\nRefund reference: {refund_id}\n"
    )
    return await send_email(email, refund_subject, text)
