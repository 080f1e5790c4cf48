"""HTTP routes for authentication.

Routes translate requests into AccountService calls. AuthError subclasses
raised by the service are rendered by the handlers in api.errors.
"""

from typing import Any

import pydantic
from fastapi import APIRouter, Depends, File, Query, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from auth.service import AccountService
from auth.types import LoginRequest, SignupRequest
from api.base import request_id_of, success_response

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_body(request: Request) -> dict[str, Any]:
    """Read a JSON or form-encoded request body as a dict.

    Raises:
        RequestValidationError: If the body is not a JSON object.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    try:
        data = await request.json()
    except ValueError as e:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error"}]
        ) from e

    if not isinstance(data, dict):
        raise RequestValidationError(
            [{"type": "model_attributes_type", "loc": ("body",), "msg": "Input should be an object"}]
        )
    return data


def _credentials(model: type[pydantic.BaseModel]):
    """Dependency that builds model from a JSON or form body."""

    async def dependency(request: Request):
        data = await _read_body(request)
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            raise RequestValidationError(e.errors(include_context=False)) from e

    return dependency


def create_auth_router(account_service: AccountService) -> APIRouter:
    """Create auth router with injected service."""
    router = APIRouter(tags=["auth"])

    @router.get("/", response_class=PlainTextResponse)
    async def root():
        return "Lifelike Backend is Running"

    @router.get("/health")
    async def health(request: Request):
        return success_response({"status": "ok"}, request_id_of(request))

    @router.post("/signup")
    def signup(request: Request, body: SignupRequest = Depends(_credentials(SignupRequest))):
        """Register an account and send its verification email."""
        result = account_service.register(email=body.email, password=body.password)
        return success_response(result.model_dump(), request_id_of(request))

    @router.get("/verify")
    def verify_email(request: Request, token: str = Query(None)):
        """Consume a verification link."""
        email = account_service.confirm_verification(token)
        return success_response({
            "email": email,
            "message": "Email verified successfully",
        }, request_id_of(request))

    @router.post("/login")
    def login(
        request: Request,
        response: Response,
        body: LoginRequest = Depends(_credentials(LoginRequest)),
    ):
        """Log in a verified account.

        Returns the session token in the body and sets it as a cookie.
        """
        session = account_service.authenticate(email=body.email, password=body.password)

        response.set_cookie(
            key="session_token",
            value=session.token,
            httponly=True,
            secure=True,
            samesite="lax",
            max_age=account_service.session_max_age_seconds,
        )

        return success_response(session.model_dump(mode="json"), request_id_of(request))

    @router.post("/upload-profile-image")
    def upload_profile_image(request: Request, profileImage: UploadFile | None = File(None)):
        """Store a profile image and return its URL."""
        data = None
        content_type = None
        if profileImage is not None:
            # One byte past the limit is enough for the service to reject it
            data = profileImage.file.read(account_service.max_profile_image_bytes + 1)
            content_type = profileImage.content_type

        result = account_service.store_profile_image(data, content_type=content_type)
        return success_response(result.model_dump(), request_id_of(request))

    @router.get("/me")
    def get_current_account(request: Request):
        """Get the authenticated account.

        Requires authentication (middleware sets the account context).
        """
        record = account_service.current_account()
        return success_response({
            "email": record.email,
            "verified": record.verified,
        }, request_id_of(request))

    return router
