import os


def _getenv(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def _getenv_bool(name: str, default: bool = False) -> bool:
    raw = _getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y", "on"}


class Settings:
    def __init__(self) -> None:
        self.environment = (_getenv("ENVIRONMENT", "development") or "development").lower()
        self.host = _getenv("APP_HOST", "127.0.0.1") or "127.0.0.1"
        self.port = int(_getenv("APP_PORT", "8000") or "8000")
        self.log_level = (_getenv("LOG_LEVEL", "INFO") or "INFO").upper()
        self.admin_token = _getenv("ADMIN_TOKEN")
        self.coupon_code_length = int(_getenv("COUPON_CODE_LENGTH", "8") or "8")
        self.seed_coupons = _getenv_bool("SEED_COUPONS", default=False)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


settings = Settings()
