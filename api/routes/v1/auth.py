"""
api/routes/v1/auth.py -- Account and credential REST endpoints.

Routes:
  POST  /api/v1/signup           -- create an account
  POST  /api/v1/login            -- password login; returns an access token
  POST  /api/v1/forget-password  -- email a one-time reset code
  POST  /api/v1/waiting-code     -- exchange the reset code for a recovery token
  PATCH /api/v1/change-password  -- set a new password (requires bearer token)

Every route is a thin adapter: validate the body (pydantic), call one flow,
map Ok/Err to a response. Flows live on app.state, built in the lifespan.

Security:
  Login returns the same "bad_credentials" error for an unknown email and a
  wrong password. Responses carrying tokens send Cache-Control: no-store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.models import (
    AccountResponse,
    ChangePasswordRequest,
    ErrorDetail,
    ForgetPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    SignUpRequest,
    WaitingCodeRequest,
    WaitingCodeResponse,
)
from auth.dependencies import get_current_account
from auth.errors import DomainError, Err, InvalidCredentialError, NotFoundError
from auth.flows import (
    AuthenticationFlow,
    ChangePasswordFlow,
    ForgetPasswordFlow,
    RegistrationFlow,
    ResetCodeVerificationFlow,
)
from auth.models import Account

router = APIRouter()

# Status codes for each domain outcome. InvalidForgetCodeError inherits from
# InvalidCredentialError and so lands on 401 as well.
_STATUS_BY_ERROR: dict[type[DomainError], int] = {
    NotFoundError: 400,
    InvalidCredentialError: 401,
}


def _raise_for(error: DomainError, default_status: int = 400) -> None:
    status = next((s for cls, s in _STATUS_BY_ERROR.items() if isinstance(error, cls)), default_status)
    raise HTTPException(
        status_code=status,
        detail=ErrorDetail(
            code=error.code,
            message=error.message,
            detail=getattr(error, "field", None) or None,
        ).model_dump(),
    )


def _no_store(content: dict, status_code: int = 200) -> JSONResponse:
    resp = JSONResponse(status_code=status_code, content=content)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/signup", response_model=AccountResponse, status_code=201)
async def signup(request: Request, body: SignUpRequest) -> AccountResponse:
    """Register a new guardian. 409 if the email or phone is already in use."""
    flow: RegistrationFlow = request.app.state.registration
    result = await flow.register(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        phone=body.phone,
        password=body.password,
    )
    if isinstance(result, Err):
        _raise_for(result.error, default_status=409)
    return AccountResponse.from_account(result.value)


@router.post("/login", response_model=LoginResponse)
async def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a bearer access token."""
    flow: AuthenticationFlow = request.app.state.authentication
    result = await flow.authenticate(body.email, body.password)
    if isinstance(result, Err):
        return _no_store(
            {"error": ErrorDetail(code=result.error.code, message=result.error.message).model_dump()},
            status_code=401,
        )
    return _no_store(
        LoginResponse(access_token=result.value, expires_in=flow.tokens.expire_seconds).model_dump()
    )


@router.post("/forget-password", response_model=MessageResponse)
async def forget_password(request: Request, body: ForgetPasswordRequest) -> MessageResponse:
    """Send a reset code to the account's email. 400 if the email is unknown."""
    flow: ForgetPasswordFlow = request.app.state.forget_password
    result = await flow.forget_password(body.email)
    if isinstance(result, Err):
        _raise_for(result.error)
    return MessageResponse(message="Email sent successfully")


@router.post("/waiting-code", response_model=WaitingCodeResponse)
async def waiting_code(request: Request, body: WaitingCodeRequest) -> JSONResponse:
    """Verify the emailed reset code and return a recovery token."""
    flow: ResetCodeVerificationFlow = request.app.state.reset_code_verification
    result = await flow.verify_reset_code(body.email, body.forget_password_code)
    if isinstance(result, Err):
        _raise_for(result.error)
    return _no_store(
        WaitingCodeResponse(
            message="Success, valid forget password code provided",
            access_token=result.value,
        ).model_dump()
    )


@router.patch("/change-password", response_model=MessageResponse)
async def change_password(
    request: Request,
    body: ChangePasswordRequest,
    current_account: Account = Depends(get_current_account),
) -> MessageResponse:
    """Replace the password of the authenticated account.

    Accepts either a login token or a recovery token from /waiting-code. The
    token is invalidated by the change, so the client must log in again.
    """
    flow: ChangePasswordFlow = request.app.state.change_password
    result = await flow.change_password(current_account.id, body.password)
    if isinstance(result, Err):
        _raise_for(result.error)
    return MessageResponse(message="Password changed successfully")
