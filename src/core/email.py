"""Email sending utility using Azure Communication Services.

Used by the support form to forward user messages to the support inbox.
"""

import logging
from html import escape
from typing import Any

from azure.communication.email import EmailClient
from azure.core.exceptions import HttpResponseError

from core.config import get_settings


_logger = logging.getLogger(__name__)

SUPPORT_SUBJECT = "Support Request"


def _get_email_client() -> EmailClient | None:
    """Get an EmailClient instance from the connection string.

    Returns None if the connection string is not configured.
    """
    settings = get_settings()
    if not settings.AZURE_COMMUNICATION_CONNECTION_STRING:
        _logger.warning(
            "AZURE_COMMUNICATION_CONNECTION_STRING is not configured. "
            "Email sending is disabled."
        )
        return None
    return EmailClient.from_connection_string(
        settings.AZURE_COMMUNICATION_CONNECTION_STRING
    )


def send_email(
    to_email: str,
    subject: str,
    plain_text_content: str,
    html_content: str | None = None,
    reply_to: str | None = None,
) -> bool:
    """Send an email using Azure Communication Services.

    Args:
        to_email: Recipient email address.
        subject: Email subject line.
        plain_text_content: Plain text body.
        html_content: Optional HTML body.
        reply_to: Optional address replies should go to.

    Returns:
        True if the email was sent successfully, False otherwise.
    """
    client = _get_email_client()
    if client is None:
        _logger.info("Email client not available. Email to %s not sent.", to_email)
        return False

    settings = get_settings()
    message: dict[str, Any] = {
        "senderAddress": settings.EMAIL_SENDER_ADDRESS,
        "recipients": {"to": [{"address": to_email}]},
        "content": {
            "subject": subject,
            "plainText": plain_text_content,
        },
    }
    if html_content:
        message["content"]["html"] = html_content
    if reply_to:
        message["replyTo"] = [{"address": reply_to}]

    try:
        poller = client.begin_send(message)
        result = poller.result()
        _logger.info(
            "Email sent successfully to %s. Message ID: %s",
            to_email,
            result.get("id", "unknown"),
        )
        return True
    except HttpResponseError as err:
        _logger.error(
            "Failed to send email to %s: %s (Status: %s)",
            to_email,
            err.message,
            err.status_code,
        )
        return False
    except Exception as exc:
        _logger.exception("Unexpected error sending email to %s: %s", to_email, exc)
        return False


def format_support_message(user_email: str, message: str) -> str:
    return f"Message from {user_email}:\n\n{message}"


def send_support_email(user_email: str, message: str) -> bool:
    """Forward a support form message to the support inbox.

    Args:
        user_email: Address of the signed-in user; replies go there.
        message: Free text entered in the support form.

    Returns:
        True if the email was sent successfully, False otherwise.
    """
    settings = get_settings()
    body = format_support_message(user_email, message)
    html_content = (
        "<html><body style=\"font-family: Arial, sans-serif;\">"
        f"<p>Message from <strong>{escape(user_email)}</strong>:</p>"
        f"<p style=\"white-space: pre-wrap;\">{escape(message)}</p>"
        "</body></html>"
    )
    return send_email(
        settings.SUPPORT_EMAIL_ADDRESS,
        SUPPORT_SUBJECT,
        body,
        html_content=html_content,
        reply_to=user_email,
    )
