import logging
from typing import Any, Dict

import httpx

from intakeapi.config import config
from intakeapi.sheets import SKIP_KEYS, cell_value, key_to_header

logger = logging.getLogger(__name__)

EMAIL_TIMEOUT_SECONDS = 20.0

SUBJECT_PREFIX = "[Alephic Labs] New "
PLAIN_TEXT_BODY = "New form submission from Alephic Labs website. View in HTML-enabled email client."

FORM_LABELS = {
    "agency-application": "Agency Project Application",
    "growlytics-early-access": "Growlytics AI Early Access Request",
    "contact": "Contact Form Message",
}


class NotificationError(Exception):
    pass


def escape_html(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def build_subject(form_type: str) -> str:
    return SUBJECT_PREFIX + FORM_LABELS.get(form_type, "Form Submission")


def build_html_body(form_type: str, timestamp: str, record: Dict[str, Any]) -> str:
    body = '<div style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;">'
    body += '<div style="background:#0a0a1f;padding:24px 32px;border-radius:12px 12px 0 0;">'
    body += '<h1 style="color:#00d4ff;margin:0;font-size:20px;">Alephic Labs</h1>'
    body += '</div>'
    body += '<div style="background:#f8fafc;padding:32px;border:1px solid #e2e8f0;border-radius:0 0 12px 12px;">'
    body += f'<h2 style="color:#1e293b;margin:0 0 8px;">{FORM_LABELS.get(form_type, "New Submission")}</h2>'
    body += f'<p style="color:#64748b;margin:0 0 24px;font-size:14px;">Received: {timestamp}</p>'

    for key, value in record.items():
        if key in SKIP_KEYS:
            continue
        value = cell_value(value)
        if not value:
            continue
        body += '<div style="margin-bottom:16px;padding-bottom:16px;border-bottom:1px solid #e2e8f0;">'
        body += (
            '<div style="font-size:12px;font-weight:600;color:#64748b;text-transform:uppercase;'
            f'letter-spacing:0.05em;margin-bottom:4px;">{key_to_header(key)}</div>'
        )
        body += f'<div style="font-size:15px;color:#1e293b;">{escape_html(value)}</div>'
        body += '</div>'

    body += '</div></div>'
    return body


def build_message(form_type: str, timestamp: str, record: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "from": f"{config.EMAIL_FROM_NAME} <{config.EMAIL_FROM}>",
        "to": [config.EMAIL_TO],
        "subject": build_subject(form_type),
        "html": build_html_body(form_type, timestamp, record),
        "text": PLAIN_TEXT_BODY,
    }


async def send_notification(
    client: httpx.AsyncClient,
    form_type: str,
    timestamp: str,
    record: Dict[str, Any],
) -> str | None:
    """Email the submission to the site inbox. Returns the provider's message id."""
    message = build_message(form_type, timestamp, record)
    headers = {
        "Authorization": f"Bearer {config.EMAIL_API_KEY}",
        "Content-Type": "application/json",
    }

    try:
        response = await client.post(config.EMAIL_API_URL, headers=headers, json=message)
    except httpx.HTTPError as e:
        logger.exception("Email API connection error")
        raise NotificationError(f"Connection error: {e.__class__.__name__}") from e

    if not 200 <= response.status_code < 300:
        error_detail = None
        try:
            data = response.json()
            if isinstance(data, dict):
                error_detail = data.get("message") or data.get("error")
        except ValueError:
            pass
        error_msg = f"Email API error: {response.status_code}"
        if error_detail:
            error_msg = f"{error_msg} ({error_detail})"
        logger.error(error_msg)
        raise NotificationError(error_msg)

    message_id = None
    try:
        data = response.json()
        if isinstance(data, dict):
            message_id = data.get("id")
    except ValueError:
        pass

    logger.info(f"Notification '{message['subject']}' sent to {config.EMAIL_TO}, message_id={message_id}")
    return message_id


async def get_mail_client():
    async with httpx.AsyncClient(timeout=EMAIL_TIMEOUT_SECONDS) as client:
        yield client
