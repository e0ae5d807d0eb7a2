import os
import secrets
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

class Config:
    """Application-wide settings."""

    # PROD: must come from the environment
    # Dev falls back to a random key (changes on every restart)
    SECRET_KEY = os.environ.get("SECRET_KEY") or secrets.token_hex(32)

    # Hosted backend (Supabase project URL + public anon key)
    SUPABASE_URL = os.environ.get("SUPABASE_URL")
    SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY")

    # Fixed public origin for canonical links and the sitemap.
    # Empty -> derived from the incoming request.
    SITE_ORIGIN = os.environ.get("SITE_ORIGIN", "").rstrip("/")

    # Number of listings shown on the home page
    HOME_LATEST_LIMIT = 6

    # Debug off by default (prod safety)
    DEBUG = os.environ.get("FLASK_DEBUG", "0") == "1"

    # Session cookie hardening
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    # Set to "0" when serving plain HTTP locally
    SESSION_COOKIE_SECURE = os.environ.get("SESSION_COOKIE_SECURE", "1") == "1"

    # Log files
    LOG_DIR = BASE_DIR / "logs"
    LOG_FILE = LOG_DIR / "app.log"

    PORT = int(os.environ.get("PORT", "5005"))
