"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from io import StringIO
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY, SALON_NAME
from .email_templates import assignment_invitation_template, booking_confirmation_template

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Raised when an email cannot be compiled or handed to the provider"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(StringIO(mjml_content))
        # mjml_to_html returns a dict with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if not resend.api_key:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailDeliveryError("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {to}")
        response = resend.Emails.send(
            {
                "from": sender,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built emails for booking events
# ============================================


async def send_assignment_invitation_email(
    to: str,
    client_name: str,
    service_name: str,
    window_text: str,
    accept_url: str,
    expires_text: str,
    notes: Optional[str] = None,
) -> dict:
    """Invite a collaborator to take a booking"""
    mjml_content = assignment_invitation_template(
        client_name=client_name,
        service_name=service_name,
        window_text=window_text,
        accept_url=accept_url,
        expires_text=expires_text,
        notes=notes,
    )
    return await send_email(
        to=to,
        subject=f"New appointment available: {service_name} · {window_text}",
        mjml_content=mjml_content,
    )


async def send_booking_confirmation_email(
    to: str,
    client_name: str,
    service_name: str,
    window_text: str,
    collaborator: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    """Tell the client their appointment is confirmed"""
    mjml_content = booking_confirmation_template(
        client_name=client_name,
        service_name=service_name,
        window_text=window_text,
        collaborator=collaborator,
        notes=notes,
    )
    return await send_email(
        to=to,
        subject=f"{SALON_NAME}: your appointment is confirmed",
        mjml_content=mjml_content,
    )
