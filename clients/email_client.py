"""
Email client for sending transactional email via the Brevo HTTP API.

Authenticates with the account's API key in the 'api-key' header.
No retries: a failed send is reported to the caller.
"""

import json
import logging

import requests

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


class EmailDeliveryError(Exception):
    """Raised when the email API request fails."""


class EmailClient:
    """Send plain-text emails through Brevo's transactional email API."""

    def __init__(
        self,
        api_key: str,
        sender_email: str,
        sender_name: str | None = None,
        api_url: str = BREVO_API_URL,
    ):
        """
        Initialize with API credentials.

        Args:
            api_key: Brevo API key
            sender_email: Verified sender address used as 'from'
            sender_name: Display name for the sender (optional)
            api_url: Transactional email endpoint

        Raises:
            ValueError: If any credential is empty
        """
        if not api_key:
            raise ValueError("api_key is required")
        if not sender_email:
            raise ValueError("sender_email is required")
        if not api_url:
            raise ValueError("api_url is required")

        self.api_key = api_key
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.api_url = api_url
        self._http = requests.Session()

    def _send(self, payload: dict) -> str | None:
        """
        Post payload to the API.

        Returns:
            The provider's message id, if it returned one.

        Raises:
            EmailDeliveryError: On any failure
        """
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "api-key": self.api_key,
        }

        try:
            response = self._http.post(
                self.api_url,
                data=json.dumps(payload, separators=(",", ":")),
                headers=headers,
                timeout=10,
            )
        except (requests.exceptions.RequestException, ConnectionError) as e:
            logger.error(f"Email API connection failed: {e}")
            raise EmailDeliveryError(f"Connection failed: {e}")

        try:
            response_data = response.json()
        except (json.JSONDecodeError, requests.exceptions.JSONDecodeError):
            logger.error(f"Email API returned invalid JSON (status {response.status_code})")
            raise EmailDeliveryError("Invalid response from email API")

        if not isinstance(response_data, dict):
            logger.error(f"Email API returned unexpected JSON (status {response.status_code})")
            raise EmailDeliveryError("Invalid response from email API")

        if response.status_code not in (200, 201, 202):
            error_msg = response_data.get("message", "Unknown error")
            logger.error(f"Email API error {response.status_code}: {error_msg}")
            raise EmailDeliveryError(f"Email API error: {error_msg}")

        return response_data.get("messageId")

    def send_email(self, to: str, subject: str, body: str) -> None:
        """
        Send a plain-text email.

        Args:
            to: Recipient email address
            subject: Email subject line
            body: Plain text email body

        Raises:
            EmailDeliveryError: On API failure
        """
        sender = {"email": self.sender_email}
        if self.sender_name:
            sender["name"] = self.sender_name

        payload = {
            "sender": sender,
            "to": [{"email": to}],
            "subject": subject,
            "textContent": body,
        }
        message_id = self._send(payload)
        logger.info(f"Email sent to {to}: {subject} (message id {message_id})")

    def close(self) -> None:
        """Close the pooled HTTP connection."""
        self._http.close()
