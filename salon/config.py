import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./salon.db")

# Salon schedule - all wall-clock values are in SALON_TIMEZONE
SALON_TIMEZONE = os.getenv("SALON_TIMEZONE", "America/Tijuana")
OPENING_HOUR = int(os.getenv("OPENING_HOUR", "9"))
CLOSING_HOUR = int(os.getenv("CLOSING_HOUR", "21"))
SLOT_MINUTES = int(os.getenv("SLOT_MINUTES", "60"))
# Comma separated weekday abbreviations, e.g. "sun,mon"
CLOSED_DAYS = os.getenv("CLOSED_DAYS", "")

if not 0 <= OPENING_HOUR <= 23 or not 1 <= CLOSING_HOUR <= 24:
    raise ValueError("OPENING_HOUR must be within 0-23 and CLOSING_HOUR within 1-24")
if OPENING_HOUR >= CLOSING_HOUR:
    raise ValueError("OPENING_HOUR must be lower than CLOSING_HOUR")
if not 15 <= SLOT_MINUTES <= 240:
    raise ValueError("SLOT_MINUTES must be between 15 and 240")

# Assignment invitations
INVITATION_TTL_HOURS = int(os.getenv("INVITATION_TTL_HOURS", "24"))
INVITATION_SWEEP_MINUTES = int(os.getenv("INVITATION_SWEEP_MINUTES", "15"))
# The sweep is an hourly cron pattern, so the interval must split the hour evenly
if INVITATION_SWEEP_MINUTES < 1 or 60 % INVITATION_SWEEP_MINUTES:
    raise ValueError("INVITATION_SWEEP_MINUTES must divide 60 (1, 2, 3, 4, 5, 6, 10, 12, 15, 20, 30 or 60)")

# Public URLs
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
# Base URL of this API as seen by collaborators opening the accept link
PUBLIC_API_URL = os.getenv("PUBLIC_API_URL", "http://localhost:8000").rstrip("/")
# CORS - dashboard and landing page origins
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")
    if origin.strip()
]
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Studio de Belleza <citas@example.com>")

SALON_NAME = os.getenv("SALON_NAME", "Studio de Belleza")
SALON_ADDRESS = os.getenv("SALON_ADDRESS", "")
SALON_PHONE = os.getenv("SALON_PHONE", "")

# Staff authentication - CRITICAL: always set in production
ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN")
if not ADMIN_API_TOKEN:
    import warnings

    warnings.warn(
        "ADMIN_API_TOKEN not set! Staff endpoints are unprotected - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
