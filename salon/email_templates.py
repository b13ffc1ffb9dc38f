"""
MJML Email Templates
Salon emails using MJML for responsive, cross-client compatibility
"""

from html import escape
from typing import Optional

from .config import SALON_ADDRESS, SALON_NAME, SALON_PHONE

# Salon theme colors - Gold/Ivory
THEME = {
    "primary": "#b08d57",
    "primary_dark": "#8c6d3f",
    "background": "#faf7f2",
    "card_bg": "#ffffff",
    "text_primary": "#1f1a14",
    "text_secondary": "#3f362b",
    "text_muted": "#7a6e60",
    "border": "#eadfcd",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{escape(cta_url)}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {escape(cta_label)}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    contact_line = " · ".join(part for part in [SALON_ADDRESS, SALON_PHONE] if part)

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{escape(title)}</mj-title>
        <mj-preview>{escape(preview_text)}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Georgia, 'Times New Roman', serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['card_bg']}" padding="32px 20px 0 20px">
          <mj-column>
            <mj-text align="center" font-size="22px" letter-spacing="2px" color="{THEME['primary_dark']}">
              {escape(SALON_NAME)}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="16px 0 32px 0" />
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="{THEME['card_bg']}" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {escape(title)}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="{THEME['text_muted']}" padding="0">
              {escape(contact_line)}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_rows(rows: list[tuple[str, str]]) -> str:
    return "".join(
        f"""
        <mj-text padding="4px 0">
          <strong>{escape(label)}:</strong> {escape(value)}
        </mj-text>
        """
        for label, value in rows
        if value
    )


def assignment_invitation_template(
    client_name: str,
    service_name: str,
    window_text: str,
    accept_url: str,
    expires_text: str,
    notes: Optional[str] = None,
) -> str:
    """Invitation for a collaborator to take a booking"""
    details = _detail_rows(
        [
            ("Service", service_name),
            ("Client", client_name),
            ("When", window_text),
            ("Client notes", notes or ""),
        ]
    )
    content = f"""
    <mj-text>
      Hi,
    </mj-text>

    <mj-text>
      You have been invited to take <strong>{escape(client_name)}</strong>'s appointment for
      <strong>{escape(service_name)}</strong>.
    </mj-text>

    {details}

    <mj-text color="{THEME['text_muted']}" font-size="14px" padding="20px 0">
      This link expires on {escape(expires_text)}. If you cannot take it, simply ignore this
      message and another collaborator can accept it.
    </mj-text>
    """

    return get_base_template(
        title="Appointment invitation",
        preview_text=f"Take {client_name}'s {service_name} appointment",
        content_sections=content,
        cta_url=accept_url,
        cta_label="Accept invitation",
    )


def booking_confirmation_template(
    client_name: str,
    service_name: str,
    window_text: str,
    collaborator: Optional[str] = None,
    notes: Optional[str] = None,
) -> str:
    """Confirmation sent to the client once a collaborator accepts"""
    details = _detail_rows(
        [
            ("Service", service_name),
            ("When", window_text),
            ("Professional", collaborator or "To be assigned"),
            ("Address", SALON_ADDRESS),
            ("Notes", notes or ""),
        ]
    )
    phone_hint = f" or call us at {escape(SALON_PHONE)}" if SALON_PHONE else ""
    content = f"""
    <mj-text>
      Hi {escape(client_name)},
    </mj-text>

    <mj-text>
      Your appointment is confirmed. These are the details of your visit:
    </mj-text>

    {details}

    <mj-text color="{THEME['text_muted']}" font-size="14px" padding="20px 0">
      If you need to reschedule, reply to this email{phone_hint}.
    </mj-text>
    """

    return get_base_template(
        title="Your appointment is confirmed",
        preview_text=f"{service_name} · {window_text}",
        content_sections=content,
    )
