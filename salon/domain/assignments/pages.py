"""Static pages shown to collaborators who open an accept link in a browser"""

from html import escape

from ...config import SALON_NAME
from ...email_templates import THEME


def render_page(title: str, message: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{escape(title)} · {escape(SALON_NAME)}</title>
</head>
<body style="margin:0;background:{THEME['background']};font-family:Georgia,'Times New Roman',serif;color:{THEME['text_secondary']};">
  <main style="max-width:480px;margin:80px auto;padding:40px;background:{THEME['card_bg']};border:1px solid {THEME['border']};border-radius:12px;text-align:center;">
    <p style="letter-spacing:2px;color:{THEME['primary_dark']};">{escape(SALON_NAME)}</p>
    <h1 style="font-size:24px;color:{THEME['text_primary']};">{escape(title)}</h1>
    <p>{escape(message)}</p>
  </main>
</body>
</html>"""


def accepted_page(client_name: str, window_text: str) -> str:
    return render_page(
        "Appointment confirmed",
        f"Thank you! {client_name}'s appointment on {window_text} is now yours.",
    )


def invalid_invitation_page() -> str:
    return render_page(
        "This invitation is no longer valid",
        "The link has expired, was already used or was replaced by a newer invitation. "
        "Please contact the salon if you still want to take this appointment.",
    )


def unavailable_booking_page(reason: str) -> str:
    return render_page("This appointment can no longer be accepted", reason)
