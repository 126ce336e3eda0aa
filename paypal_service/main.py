import logging
import os
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from paypal_service import pages
from paypal_service.config import ENV_PATH, Settings
from paypal_service.paypal_client import PayPalClient, TokenCache
from paypal_service.routes import router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(title="PayPal Checkout Service")
    app.state.settings = settings
    app.state.paypal_client = PayPalClient(
        settings,
        token_cache=TokenCache() if settings.token_cache else None,
    )

    app.include_router(router)
    app.include_router(pages.router)
    return app


def configure_logging():
    # Runs before anything in Settings.from_env logs
    load_dotenv(dotenv_path=ENV_PATH)
    logging.basicConfig(
        level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run():
    configure_logging()
    settings = Settings.from_env()
    logging.getLogger(__name__).info("Server is running on port %s", settings.port)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
