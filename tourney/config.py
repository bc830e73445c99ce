import os
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/tourney.db")

# Sessions
SESSION_COOKIE_NAME = "tourney_session"
SESSION_EXPIRE_DAYS = int(os.getenv("SESSION_EXPIRE_DAYS", "7"))

# Admin seeded on startup (in production, use environment variables)
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "password")

# Roles allowed to act on behalf of either side of a match
OFFICIAL_ROLES = frozenset({"admin", "moderator", "mod"})

# Tournament defaults
DEFAULT_MAX_TEAMS = 16
DEFAULT_BRACKET_SIZE = 16
CHECK_IN_CODE_BYTES = 3  # 6 hex characters

# Highest score a side may report
MAX_SCORE = int(os.getenv("MAX_SCORE", "9999"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Rate limits
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "1") == "1"
# Peers whose X-Forwarded-For header is believed, comma-separated
TRUSTED_PROXIES = frozenset(
    address.strip() for address in os.getenv("TRUSTED_PROXIES", "").split(",") if address.strip()
)
STRICT_RATE_LIMIT = "10 per 15 minutes"
MODERATE_RATE_LIMIT = "50 per 15 minutes"
