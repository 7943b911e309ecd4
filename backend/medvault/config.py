"""Application configuration."""

import os
import secrets
from pathlib import Path

DATA_DIR = Path(os.environ.get("DATA_DIR", str(Path(__file__).parent.parent.parent / "data")))

DATABASE_URL = os.environ.get("DATABASE_URL", "").strip() or f"sqlite:///{DATA_DIR}/medvault.db"

# Bearer token signing key. Tokens do not survive a restart unless this is set.
SECRET_KEY = os.environ.get("MEDVAULT_SECRET_KEY", "").strip() or secrets.token_hex(32)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()

# Download authorization
DEFAULT_AUTHORIZATION_HOURS = int(os.environ.get("DEFAULT_AUTHORIZATION_HOURS", "24"))
REQUEST_COOLDOWN_SECONDS = int(os.environ.get("REQUEST_COOLDOWN_SECONDS", str(24 * 60 * 60)))

# Listings
MAX_PAGE_SIZE = int(os.environ.get("MAX_PAGE_SIZE", "100"))
