"""
Lifelike backend - application entry point.

Collaborator handles are built once at startup and the Valkey connection is
closed on shutdown.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from auth.api import create_auth_router
from auth.config import AuthConfig
from auth.database import ValkeyAccountStore
from auth.password import CredentialHasher
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AccountService
from auth.session import SessionManager
from auth.tokens import TokenSigner
from clients.blob_client import BlobStoreClient
from clients.email_client import EmailClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import (
    get_blob_config,
    get_email_config,
    get_token_secret,
    get_valkey_url,
)

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if os.getenv("DEBUG") else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
        stream=sys.stdout,
    )
    for noisy in ("urllib3", "botocore", "boto3", "hvac"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def create_app(config: AuthConfig | None = None) -> FastAPI:
    """Build the app with production collaborators from Vault."""
    config = config or AuthConfig()

    valkey = ValkeyClient(get_valkey_url())
    email_config = get_email_config()
    blob_config = get_blob_config()

    email_client = EmailClient(
        api_key=email_config["api_key"],
        sender_email=email_config["sender_email"],
        sender_name=config.app_name,
    )
    signer = TokenSigner(get_token_secret(), config)
    session_manager = SessionManager(signer, config)
    account_service = AccountService(
        config=config,
        store=ValkeyAccountStore(valkey),
        hasher=CredentialHasher(config),
        signer=signer,
        session_manager=session_manager,
        email_client=email_client,
        blob_client=BlobStoreClient(
            bucket_name=blob_config["bucket_name"],
            region=blob_config["region"],
        ),
        security_logger=SecurityLogger(),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Lifelike backend started")
        yield
        email_client.close()
        valkey.close()
        logger.info("Lifelike backend stopped")

    app = FastAPI(title="Lifelike Backend", version="1.0.0", lifespan=lifespan)

    app.add_middleware(AuthMiddleware, session_manager=session_manager)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(create_auth_router(account_service))

    return app


if __name__ == "__main__":
    load_dotenv()
    configure_logging()
    uvicorn.run(create_app(), host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
