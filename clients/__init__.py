# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    get_token_secret,
    get_valkey_url,
    get_email_config,
    get_blob_config,
)
from clients.valkey_client import ValkeyClient
from clients.email_client import EmailClient, EmailDeliveryError
from clients.blob_client import BlobStoreClient, BlobStoreError
