import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

SANDBOX_BASE_URL = "https://api-m.sandbox.paypal.com"


class Settings(BaseModel):
    paypal_base_url: str = SANDBOX_BASE_URL
    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    public_client_id: str = ""
    public_base_url: str = "http://localhost:3000"
    port: int = 3000
    request_timeout: float = 30.0
    token_cache: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(dotenv_path=ENV_PATH)

        client_id = os.getenv("PAYPAL_CLIENT_ID", "")
        settings = cls(
            paypal_base_url=os.getenv("PAYPAL_BASEURL") or SANDBOX_BASE_URL,
            paypal_client_id=client_id,
            paypal_client_secret=os.getenv("PAYPAL_CLIENT_SECRET", ""),
            public_client_id=os.getenv("PAYPAL_PUBLIC_CLIENT_ID") or client_id,
            public_base_url=os.getenv("PUBLIC_BASE_URL") or "http://localhost:3000",
            port=int(os.getenv("PORT") or "3000"),
            request_timeout=float(os.getenv("PAYPAL_TIMEOUT") or "30"),
            token_cache=os.getenv("PAYPAL_TOKEN_CACHE", "false").lower() in ("1", "true", "yes"),
            log_level=os.getenv("LOG_LEVEL") or "INFO",
        )
        if not settings.has_credentials:
            logger.warning("PAYPAL_CLIENT_ID / PAYPAL_CLIENT_SECRET are not set. Check your .env file.")
        return settings

    @property
    def has_credentials(self) -> bool:
        return bool(self.paypal_client_id and self.paypal_client_secret)

    @property
    def api_base(self) -> str:
        return self.paypal_base_url.rstrip("/")

    @property
    def complete_url(self) -> str:
        return f"{self.public_base_url.rstrip('/')}/complete-payment"

    @property
    def cancel_url(self) -> str:
        return f"{self.public_base_url.rstrip('/')}/cancel-payment"
