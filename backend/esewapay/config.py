"""
esewa-pay Configuration Module

Loads eSewa merchant settings from environment variables (prefix ESEWA_)
or a .env file.
"""
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal

from .models.payments import EsewaEnvironment


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Notes:
    - The secret key is a SecretStr so it never shows up in reprs or logs
    - The default key is the one eSewa publishes for its sandbox
    - success/failure URLs are derived from public_base_url
    """

    # Merchant credentials
    secret_key: SecretStr = SecretStr("8gBm/:&EnhH.1/q")
    product_code: str = "EPAYTEST"
    environment: EsewaEnvironment = EsewaEnvironment.SANDBOX

    # Outbound calls
    request_timeout_seconds: float = 10.0
    use_mock_gateway: bool = False

    # Callback URLs
    public_base_url: str = "http://127.0.0.1:8000"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_prefix="ESEWA_",
        env_file=".env",
        case_sensitive=False,
    )

    @property
    def success_url(self) -> str:
        return f"{self.public_base_url.rstrip('/')}/api/payments/success"

    @property
    def failure_url(self) -> str:
        return f"{self.public_base_url.rstrip('/')}/api/payments/failure"


# Global settings instance
settings = Settings()
