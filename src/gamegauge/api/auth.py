"""Auth API — registration, login, forgot/reset password.

Learn: Routes for the account lifecycle. All of them are open (no bearer
token); the protected profile route lives in api/users.py.
- POST /auth/register → create an account (reCAPTCHA-gated)
- POST /auth/login → email/password → bearer token
- POST /auth/forgot-password → email a single-use reset link
- POST /auth/reset-password → reset token + new password

Routes only translate HTTP ↔ service calls. Every failure is a domain
error that api/errors.py turns into a response.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gamegauge.auth.dependencies import get_token_service
from gamegauge.auth.jwt import TokenService
from gamegauge.auth.recaptcha import get_human_verifier
from gamegauge.db.engine import get_db
from gamegauge.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from gamegauge.services.auth_service import AuthService, HumanVerifier, ResetNotifier
from gamegauge.services.email_service import get_notifier

router = APIRouter(prefix="/auth")

FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset link has been sent."


def _svc(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    verifier: HumanVerifier = Depends(get_human_verifier),
    notifier: ResetNotifier = Depends(get_notifier),
) -> AuthService:
    return AuthService(db, tokens=tokens, verifier=verifier, notifier=notifier)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(body: RegisterRequest, svc: AuthService = Depends(_svc)):
    """Create a new user account."""
    await svc.register_user(
        username=body.username,
        email=body.email,
        password=body.password,
        recaptcha_token=body.recaptcha_token,
    )
    return MessageResponse(message="User registered successfully!")


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Login with email and password → bearer token."""
    token = await svc.login(body.email, body.password, body.recaptcha_token)
    return TokenResponse(token=token)


# ─── Password reset ─────────────────────────────────────


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(body: ForgotPasswordRequest, svc: AuthService = Depends(_svc)):
    """Always the same answer, whether or not the account exists."""
    await svc.forgot_password(body.email)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, svc: AuthService = Depends(_svc)):
    await svc.reset_password(body.token, body.new_password)
    return MessageResponse(message="Password has been reset successfully.")
