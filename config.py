import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Payment provider
    STRIPE_SECRET_KEY = data.get("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET = data.get("STRIPE_WEBHOOK_SECRET", "")
    STRIPE_WEBHOOK_TOLERANCE = int(data.get("STRIPE_WEBHOOK_TOLERANCE", 300))
    STRIPE_ANNUAL_FEE_PRICE_ID = data.get("STRIPE_ANNUAL_FEE_PRICE_ID", "")
    STRIPE_FREE_TIER_PRICE_ID = data.get("STRIPE_FREE_TIER_PRICE_ID", "")
    STRIPE_MAX_NETWORK_RETRIES = int(data.get("STRIPE_MAX_NETWORK_RETRIES", 2))
    STRIPE_TIMEOUT_SECONDS = float(data.get("STRIPE_TIMEOUT_SECONDS", 5))

    # Billing rules
    DEFAULT_PLATFORM_FEE_PERCENT = str(data.get("DEFAULT_PLATFORM_FEE_PERCENT", "1.5"))
    FOUNDING_MEMBER_LIMIT = int(data.get("FOUNDING_MEMBER_LIMIT", 100))
    INVOICE_NUMBER_PREFIX = data.get("INVOICE_NUMBER_PREFIX", "VTK-")
    RECEIPT_NUMBER_PREFIX = data.get("RECEIPT_NUMBER_PREFIX", "RCP-")
    OUTBOX_MAX_ATTEMPTS = int(data.get("OUTBOX_MAX_ATTEMPTS", 5))
    OUTBOX_LEASE_SECONDS = int(data.get("OUTBOX_LEASE_SECONDS", 300))
