"""Persistence for account records.

Two interchangeable stores sit behind the AccountStore protocol:
an in-process map for development and tests, and Valkey for deployments.
Both make insert_if_absent atomic so two concurrent signups for the same
email cannot both succeed.
"""

import threading
from typing import Any, Protocol

from auth.types import UserRecord
from clients.valkey_client import ValkeyClient
from utils.timezone import parse_iso

UPDATABLE_FIELDS = frozenset({"verified"})


class AccountStore(Protocol):
    """Key-value persistence for UserRecord, keyed by email."""

    def get(self, email: str) -> UserRecord | None:
        ...

    def insert_if_absent(self, record: UserRecord) -> bool:
        ...

    def update_field(self, email: str, field: str, value: Any) -> bool:
        ...


def _check_field(field: str, value: Any) -> None:
    if field not in UPDATABLE_FIELDS:
        raise ValueError(f"Field '{field}' is not updatable")
    # Verification is terminal: the flag only ever moves from False to True
    if field == "verified" and value is not True:
        raise ValueError("verified can only be set to True")


class InMemoryAccountStore:
    """Process-local store. Records are lost on restart."""

    def __init__(self):
        self._records: dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    def get(self, email: str) -> UserRecord | None:
        """Find record by email (exact match)."""
        with self._lock:
            record = self._records.get(email)
            return record.model_copy() if record else None

    def insert_if_absent(self, record: UserRecord) -> bool:
        """Store record unless one exists for its email.

        Returns:
            True if stored, False if the email was already taken.
        """
        with self._lock:
            if record.email in self._records:
                return False
            self._records[record.email] = record.model_copy()
            return True

    def update_field(self, email: str, field: str, value: Any) -> bool:
        """Set a single field on an existing record.

        Returns:
            True if the record was found and updated, False if not found.
        """
        _check_field(field, value)
        with self._lock:
            record = self._records.get(email)
            if record is None:
                return False
            self._records[email] = record.model_copy(update={field: value})
            return True


class ValkeyAccountStore:
    """Account records stored as JSON documents in Valkey."""

    KEY_PREFIX = "user:"

    def __init__(self, valkey: ValkeyClient):
        self._valkey = valkey

    def _key(self, email: str) -> str:
        """Generate Valkey key for an account email."""
        return f"{self.KEY_PREFIX}{email}"

    def get(self, email: str) -> UserRecord | None:
        """Find record by email (exact match)."""
        data = self._valkey.get_json(self._key(email))
        if data is None:
            return None
        return UserRecord(
            email=data["email"],
            credential_hash=data["credential_hash"],
            verified=data["verified"],
            created_at=parse_iso(data["created_at"]),
        )

    def insert_if_absent(self, record: UserRecord) -> bool:
        """Store record with SET NX.

        Returns:
            True if stored, False if the email was already taken.
        """
        return self._valkey.set_json_if_absent(
            self._key(record.email),
            {
                "email": record.email,
                "credential_hash": record.credential_hash,
                "verified": record.verified,
                "created_at": record.created_at.isoformat(),
            },
        )

    def update_field(self, email: str, field: str, value: Any) -> bool:
        """Set a single field on an existing record.

        Returns:
            True if the record was found and updated, False if not found.
        """
        _check_field(field, value)
        return self._valkey.update_json(self._key(email), {field: value})
