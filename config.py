import os


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")
    DEBUG = False
    TESTING = False
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI", "sqlite:///storefront.db")

    # Shopify Storefront API
    SHOPIFY_SHOP_DOMAIN = os.getenv("SHOPIFY_SHOP_DOMAIN", "test-store-project-56.myshopify.com")
    SHOPIFY_STOREFRONT_TOKEN = os.getenv("SHOPIFY_STOREFRONT_TOKEN", "")
    SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2024-01")
    CATALOG_PAGE_SIZE = int(os.getenv("CATALOG_PAGE_SIZE", "20"))
    CATALOG_REFRESH_HOURS = int(os.getenv("CATALOG_REFRESH_HOURS", "3"))
    SCHEDULER_ENABLED = _env_bool("SCHEDULER_ENABLED", True)

    # Chat completions
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
    OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", "1000"))

    HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))

    # Cart pricing
    TAX_RATE = os.getenv("TAX_RATE", "0.0825")
    SHIPPING_FEE = os.getenv("SHIPPING_FEE", "7.99")
    FREE_SHIPPING_THRESHOLD = os.getenv("FREE_SHIPPING_THRESHOLD", "75")
    PROMO_CODES = {
        "SHINE10": "0.10",
        "GARAGE20": "0.20",
        "FIRST15": "0.15",
    }
    CHECKOUT_URL = os.getenv("CHECKOUT_URL", "https://your-store.myshopify.com/checkout")


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///dev.db")


class ProductionConfig(Config):
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI", "sqlite:///prod.db")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SCHEDULER_ENABLED = False
    SHOPIFY_SHOP_DOMAIN = "test-shop.myshopify.com"
    SHOPIFY_STOREFRONT_TOKEN = "test-token"
    OPENAI_API_KEY = "test-key"
