"""
Outgoing email through the Resend API.

The API key is read from settings on every send so a rotated key takes
effect without a restart.  With no key configured (development, CI) the
message is logged and reported as delivered.
"""
import asyncio
import html
import logging
from functools import partial

import resend

from app.config import settings
from app.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)

_CARD_STYLE = (
    "max-width: 600px; margin: 20px auto; background-color: #ffffff; padding: 20px; "
    "border-radius: 8px; box-shadow: 0 0 10px rgba(0, 0, 0, 0.1);"
)
_BUTTON_STYLE = (
    "display: inline-block; padding: 10px 20px; background-color: #3498db; "
    "color: #ffffff; text-decoration: none; border-radius: 5px;"
)


def render_invite_email(project_title: str, accept_url: str) -> str:
    """HTML body for a project invitation."""
    safe_title = html.escape(project_title)
    safe_url = html.escape(accept_url, quote=True)
    return f"""<div style="{_CARD_STYLE}">
    <p style="font-size: 20px; font-weight: 600;">You are invited to join the {safe_title} project</p>
    <a style="{_BUTTON_STYLE}" href="{safe_url}" target="_blank">Click here to join</a>
    <p style="color: #666; font-size: 14px;">
        If the button does not work, open this link:<br>{safe_url}
    </p>
</div>"""


async def send_email(to: str, subject: str, html_body: str, text: str | None = None) -> dict:
    """
    Send one message and return the transport's response.

    Raises MailDeliveryError when the API rejects the message, the call
    fails, or it does not finish within ``MAIL_SEND_TIMEOUT_SECONDS``.
    """
    if not settings.MAIL_API_KEY:
        logger.warning("MAIL_API_KEY not set - email to %s not sent (subject=%r)", to, subject)
        return {"id": None}

    resend.api_key = settings.MAIL_API_KEY
    params = {
        "from": settings.MAIL_FROM,
        "to": [to],
        "subject": subject,
        "html": html_body,
    }
    if text:
        params["text"] = text

    loop = asyncio.get_running_loop()
    try:
        response = await asyncio.wait_for(
            loop.run_in_executor(None, partial(resend.Emails.send, params)),
            timeout=settings.MAIL_SEND_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as exc:
        logger.error(
            "Email to %s timed out after %ss", to, settings.MAIL_SEND_TIMEOUT_SECONDS
        )
        raise MailDeliveryError("Mail transport timed out") from exc
    except Exception as exc:
        logger.error("Email to %s failed: %s", to, exc)
        raise MailDeliveryError(str(exc)) from exc

    logger.info("Email sent to %s (id=%s)", to, response.get("id") if response else None)
    return response
