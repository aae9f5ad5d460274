import os
from functools import lru_cache


class Settings:
    def __init__(
        self,
        api_base_url: str,
        api_timeout_secs: float,
        timezone: str,
        csrf_secret: str,
        validate_amount: bool,
        log_level: str,
    ) -> None:
        self.api_base_url = api_base_url
        self.api_timeout_secs = api_timeout_secs
        self.timezone = timezone
        self.csrf_secret = csrf_secret
        self.validate_amount = validate_amount
        self.log_level = log_level


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    api_base_url = os.getenv("EXPENSES_API_BASE_URL", "").strip().rstrip("/")
    api_timeout_secs = float(os.getenv("EXPENSES_API_TIMEOUT_SECS", "10"))
    timezone = os.getenv("EXPENSES_TIMEZONE", "Asia/Jakarta")
    csrf_secret = os.getenv(
        "EXPENSES_CSRF_SECRET",
        "3f1c7d0b9a5e42c88e61d2a4b7f09c35e8a1d6b2c4f7e90a13b5d8c2e6f4a701",
    )
    validate_amount = _env_flag("EXPENSES_VALIDATE_AMOUNT", True)
    log_level = os.getenv("EXPENSES_LOG_LEVEL", "INFO").upper()
    return Settings(
        api_base_url=api_base_url,
        api_timeout_secs=api_timeout_secs,
        timezone=timezone,
        csrf_secret=csrf_secret,
        validate_amount=validate_amount,
        log_level=log_level,
    )
