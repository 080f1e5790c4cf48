"""API modules for HTTP interface."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    request_id_of,
    success_response,
    error_response,
    ErrorCodes,
)
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
