import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    print(f"\n ERROR: Invalid RUNTIME_ENVIRONMENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('RUNTIME_ENVIRONMENT', '(not set)')}", file=sys.stderr)
    print(f"\nAdd to .env: RUNTIME_ENVIRONMENT={valid_values[0]}\n", file=sys.stderr)
    sys.exit(1)

# Storage backend: chosen once at startup, see db.create_storage()
try:
    DB_BACKEND = os.environ.get("DB_BACKEND", "sqlite").strip().lower()
    if DB_BACKEND not in ("sqlite", "postgres"):
        raise ValueError(f"Unsupported DB_BACKEND '{DB_BACKEND}'")
    DB_NAME = os.environ.get("DB_NAME", "storefront.db")
    DATABASE_URL = os.environ.get("DATABASE_URL", "")
    if DB_BACKEND == "postgres" and not DATABASE_URL:
        raise ValueError("DB_BACKEND=postgres but DATABASE_URL is not set")
except ValueError as e:
    print(f"\n ERROR: Invalid database configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected: DB_BACKEND=sqlite (with DB_NAME) or DB_BACKEND=postgres (with DATABASE_URL)", file=sys.stderr)
    print(f"Current value: {os.environ.get('DB_BACKEND', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)

DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "5"))
DB_MAX_OVERFLOW = int(os.environ.get("DB_MAX_OVERFLOW", "10"))

# Stripe
STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
STRIPE_CURRENCY = os.environ.get("STRIPE_CURRENCY", "usd").lower()

# Email (Resend HTTP API)
RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "")
RESEND_API_URL = os.environ.get("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_FROM = os.environ.get("EMAIL_FROM", "")
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "")
APP_URL = os.environ.get("APP_URL", "http://localhost:3000")

# Telegram operator channel (optional)
# Bulk charge summaries are mirrored to these admins when TOKEN is configured
TOKEN = os.environ.get("TOKEN", "")
try:
    _admin_id_list_str = os.environ.get("ADMIN_ID_LIST", "")
    ADMIN_ID_LIST = [int(admin_id.strip()) for admin_id in _admin_id_list_str.split(',') if admin_id.strip()]
except ValueError as e:
    print(f"\n ERROR: Invalid ADMIN_ID_LIST configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected format: comma-separated list of Telegram user IDs", file=sys.stderr)
    print(f"Example: ADMIN_ID_LIST=123456789,987654321", file=sys.stderr)
    print(f"Current value: {os.environ.get('ADMIN_ID_LIST', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)

# Checkout
PRICE_TOLERANCE = float(os.environ.get("PRICE_TOLERANCE", "0.01"))  # Max allowed client/server total drift
LOGIN_STALE_DAYS = int(os.environ.get("LOGIN_STALE_DAYS", "7"))  # Days before a backer must re-verify

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log Retention: Environment-specific defaults
# Dev: keep a month for debugging
# Prod: Use 5 days default to save disk space
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))
