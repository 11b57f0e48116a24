from typing import Annotated, Callable

from fastapi import APIRouter, Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eventhub.application.login import login_user
from eventhub.application.password_reset import (
    confirm_password_reset,
    request_password_reset,
)
from eventhub.application.verification import (
    register_user,
    resend_verification_code,
    verify_email,
)
from eventhub.domain.entities import User
from eventhub.domain.errors import (
    AlreadyVerified,
    EmailNotVerified,
    InvalidCredentials,
    InvalidOrExpiredCode,
    UserAlreadyExists,
    UserNotFound,
)
from eventhub.domain.otp import OtpService
from eventhub.domain.ports.email_port import EmailPort
from eventhub.domain.ports.token_issuer import TokenIssuerPort
from eventhub.domain.ports.unit_of_work import UnitOfWorkPort
from eventhub.presentation.dependencies import (
    get_email_port,
    get_hash_password,
    get_otp_service,
    get_sessions,
    get_uow,
    get_verify_password,
)
from eventhub.schemas.requests import (
    ForgotPasswordIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
    VerifyOtpIn,
)
from eventhub.schemas.responses import AuthOut, MessageOut, RegisteredOut, UserOut

router = APIRouter(prefix="/auth", tags=["Authentication"])
bearer_scheme = HTTPBearer(auto_error=False)


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(auth: HTTPAuthorizationCredentials | None) -> str:
    if auth is None or not auth.credentials:
        raise _unauthorized("missing bearer token")
    return auth.credentials


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisteredOut)
async def post_register(
    body: RegisterIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    otp: Annotated[OtpService, Depends(get_otp_service)],
    email_port: Annotated[EmailPort, Depends(get_email_port)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    try:
        user = await register_user(
            uow,
            otp,
            email_port,
            name=body.name,
            email=body.email,
            password=body.password,
            hash_password=hash_password,
        )
    except UserAlreadyExists:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )
    return RegisteredOut(
        user=UserOut.from_user(user),
        message="Registration successful. Please check your email for verification code.",
    )


@router.post("/login", response_model=AuthOut, response_model_exclude_none=True)
async def post_login(
    body: LoginIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sessions: Annotated[TokenIssuerPort, Depends(get_sessions)],
    verify_password: Annotated[Callable[[str, str], bool], Depends(get_verify_password)],
):
    # rememberMe only decides where the client keeps the token
    try:
        user, token = await login_user(
            uow,
            sessions,
            email=body.email,
            password=body.password,
            verify_password=verify_password,
        )
    except InvalidCredentials:
        raise _unauthorized("Invalid credentials")
    except EmailNotVerified:
        raise _unauthorized("Please verify your email before logging in")
    return AuthOut(user=UserOut.from_user(user), token=token)


@router.post("/verify-otp", response_model=AuthOut)
async def post_verify_otp(
    body: VerifyOtpIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    otp: Annotated[OtpService, Depends(get_otp_service)],
    sessions: Annotated[TokenIssuerPort, Depends(get_sessions)],
):
    try:
        user, token = await verify_email(
            uow, otp, sessions, email=body.email, code=body.otp_code
        )
    except InvalidOrExpiredCode:
        raise _bad_request("Invalid or expired OTP code")
    except UserNotFound:
        raise _bad_request("User not found")
    return AuthOut(
        user=UserOut.from_user(user),
        token=token,
        message="Email verification successful",
    )


@router.get("/resend-otp/{email}", response_model=MessageOut)
async def get_resend_otp(
    email: str,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    otp: Annotated[OtpService, Depends(get_otp_service)],
    email_port: Annotated[EmailPort, Depends(get_email_port)],
):
    try:
        await resend_verification_code(uow, otp, email_port, email=email)
    except UserNotFound:
        raise _bad_request("User not found")
    except AlreadyVerified:
        raise _bad_request("User is already verified")
    return MessageOut(message="Verification code has been resent to your email")


@router.post("/forgot-password", response_model=MessageOut)
async def post_forgot_password(
    body: ForgotPasswordIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    otp: Annotated[OtpService, Depends(get_otp_service)],
    email_port: Annotated[EmailPort, Depends(get_email_port)],
):
    try:
        await request_password_reset(uow, otp, email_port, email=body.email)
    except UserNotFound:
        raise _bad_request("User not found")
    return MessageOut(message="Password reset instructions have been sent to your email")


@router.post("/reset-password", response_model=MessageOut)
async def post_reset_password(
    body: ResetPasswordIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    otp: Annotated[OtpService, Depends(get_otp_service)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    try:
        await confirm_password_reset(
            uow,
            otp,
            email=body.email,
            code=body.otp_code,
            new_password=body.new_password,
            hash_password=hash_password,
        )
    except (InvalidOrExpiredCode, UserNotFound):
        raise _bad_request("Invalid or expired code")
    return MessageOut(message="Password has been reset successfully")


@router.get("/profile", response_model=UserOut)
async def get_profile(
    auth: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sessions: Annotated[TokenIssuerPort, Depends(get_sessions)],
):
    token = _bearer_token(auth)
    user_id = await sessions.get(token)
    if not user_id:
        raise _unauthorized("invalid or expired token")

    async with uow as tx:
        user: User | None = await tx.db_users.get_by_id(user_id)
        # no state change; no commit needed
    if not user:
        raise _unauthorized("unknown user")
    return UserOut.from_user(user)


@router.post("/logout", response_model=MessageOut)
async def post_logout(
    auth: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    sessions: Annotated[TokenIssuerPort, Depends(get_sessions)],
):
    await sessions.revoke(_bearer_token(auth))
    return MessageOut(message="Logged out")
