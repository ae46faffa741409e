# app/core/config.py

import os
from decimal import Decimal
from dotenv import load_dotenv
from app.utils.logger import get_logger

logger = get_logger(__name__)

load_dotenv()

# =====================================================
# APPLICATION
# =====================================================
APP_ENV = os.getenv("APP_ENV")
if APP_ENV not in {"development", "staging", "production"}:
    raise ValueError("APP_ENV must be development | staging | production")

IS_PRODUCTION = APP_ENV == "production"

APP_URL = os.getenv("APP_URL", "http://localhost:5173")

# =====================================================
# DATABASE
# =====================================================
DB_TYPE = os.getenv("DB_TYPE")
if DB_TYPE not in {"postgres", "sqlite"}:
    raise ValueError("DB_TYPE must be postgres | sqlite")

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres")

elif DB_TYPE == "sqlite":
    if IS_PRODUCTION:
        raise ValueError("SQLite is NOT allowed in production")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./dev.db")

# ---- Pool tuning (safe defaults) ----
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 20))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", 30))
DB_ECHO_POOL = os.getenv("DB_ECHO_POOL", "false").lower() == "true"

# ---- SSL ----
DB_SSL_VERIFY = os.getenv("DB_SSL_VERIFY", "true").lower() == "true"
if IS_PRODUCTION and not DB_SSL_VERIFY:
    logger.warning(
        "Running in production with relaxed SSL verification "
        "(hosted Postgres pooler compatibility mode)"
    )

# =====================================================
# HOSTED AUTH (token verification only)
# =====================================================
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")
if not AUTH_JWT_SECRET:
    raise ValueError("AUTH_JWT_SECRET must be set")

AUTH_JWT_ALGORITHM = "HS256"
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated")

# =====================================================
# PAYMENTS (Stripe)
# =====================================================
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
CHECKOUT_CURRENCY = os.getenv("CHECKOUT_CURRENCY", "usd")

# =====================================================
# INVOICING (Invoiced.com)
# =====================================================
INVOICED_API_KEY = os.getenv("INVOICED_API_KEY")
INVOICED_BASE_URL = os.getenv("INVOICED_BASE_URL", "https://api.invoiced.com")
INVOICED_PAYMENT_TERMS = os.getenv("INVOICED_PAYMENT_TERMS", "NET 15")

# Flat fee billed per completed partner quote request
API_QUOTE_FEE = Decimal(os.getenv("API_QUOTE_FEE", "50"))

# =====================================================
# PARTNER API
# =====================================================
# Partners whose quote requests may omit applicant_name
PARTNERS_WITHOUT_APPLICANT_NAME = {
    name.strip().lower()
    for name in os.getenv("PARTNERS_WITHOUT_APPLICANT_NAME", "hireright").split(",")
    if name.strip()
}

# =====================================================
# EMAIL (Resend)
# =====================================================
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
SENDER_EMAIL = os.getenv("SENDER_EMAIL", "OpenEval <noreply@openeval.com>")
ORDER_SENDER_EMAIL = os.getenv(
    "ORDER_SENDER_EMAIL", "OpenTranslate <orders@mail.opentranslate.co>"
)
ADMIN_NOTIFICATION_EMAIL = os.getenv("ADMIN_NOTIFICATION_EMAIL")

# =====================================================
# API KEY HASHING
# =====================================================
API_KEY_BCRYPT_ROUNDS = int(os.getenv("API_KEY_BCRYPT_ROUNDS", 10))
