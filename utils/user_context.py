"""Propagate the authenticated account's email through the call stack."""

from contextlib import contextmanager
from contextvars import ContextVar

_current_email: ContextVar[str | None] = ContextVar("current_email", default=None)


def get_current_email() -> str:
    """
    Get the authenticated account's email from context.

    Raises RuntimeError if no account context is set. Code that needs an
    authenticated caller and finds none is being called from the wrong place.
    """
    email = _current_email.get()
    if email is None:
        raise RuntimeError(
            "No account context set. This usually means you're calling "
            "account-scoped code outside of an authenticated request."
        )
    return email


def set_current_email(email: str) -> None:
    """
    Set the authenticated account's email in context.

    Called by auth middleware after validating the session token.
    """
    _current_email.set(email)


def clear_current_email() -> None:
    """
    Clear account context.

    Called by auth middleware after the request completes.
    Must be called in a finally block to prevent context leakage.
    """
    _current_email.set(None)


@contextmanager
def account_context(email: str):
    """
    Temporarily set the account context.

    Example:
        with account_context("a@example.com"):
            assert get_current_email() == "a@example.com"
    """
    previous = _current_email.get()
    set_current_email(email)
    try:
        yield
    finally:
        if previous is None:
            clear_current_email()
        else:
            set_current_email(previous)
