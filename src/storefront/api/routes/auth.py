"""
Authentication routes.

Defines the three-step registration flow, login/logout,
session check and password reset endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from storefront.api.dependencies import (
    get_auth_service,
    get_current_session,
    get_registration_service,
    get_session_id,
    get_session_store,
    get_storage,
)
from storefront.api.models import (
    AuthResponse,
    AuthUser,
    EmailMessageResponse,
    ErrorResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterCompleteRequest,
    RegisterInitRequest,
    RegisterVerifyRequest,
    ResetPasswordRequest,
    SessionCheckResponse,
    SessionUser,
)
from storefront.api.sessions import Session, SessionStore
from storefront.domain.auth import AuthService
from storefront.domain.exceptions import (
    AccountSuspended,
    DeliveryError,
    EmailAlreadyRegistered,
    InvalidCredentials,
    NotFoundError,
    ValidationError,
)
from storefront.domain.models import User
from storefront.domain.ports import Storage
from storefront.domain.registration import RegistrationService

router = APIRouter(prefix="/auth", tags=["auth"])


def _start_session(request: Request, response: Response, user: User) -> None:
    sessions: SessionStore = get_session_store(request)
    response.set_cookie(
        key=request.app.state.settings.session_cookie_name,
        value=sessions.create(user),
        max_age=sessions.max_age_seconds,
        httponly=True,
        samesite="lax",
    )


@router.get("/check", response_model=SessionCheckResponse)
async def check(
    session: Session | None = Depends(get_current_session),
    storage: Storage = Depends(get_storage),
) -> SessionCheckResponse:
    """Return the logged-in user, or ``null`` when there is none."""
    user = storage.get_user(session.user_id) if session else None
    if user is None:
        return SessionCheckResponse(user=None)
    return SessionCheckResponse(
        user=SessionUser(id=user.id, email=user.email, is_admin=user.is_admin)
    )


@router.post(
    "/register/init",
    response_model=EmailMessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or already registered email"},
        500: {"model": ErrorResponse, "description": "Code could not be delivered"},
    },
    summary="Start registration",
    description="Send a 6-character verification code to the email address.",
)
async def register_init(
    request_data: RegisterInitRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> EmailMessageResponse:
    try:
        email = service.init(request_data.email)
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        ) from None
    except DeliveryError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification code",
        ) from None
    return EmailMessageResponse(message="Verification code sent to your email", email=email)


@router.post(
    "/register/verify",
    response_model=EmailMessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired code"}},
    summary="Verify registration code",
)
async def register_verify(
    request_data: RegisterVerifyRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> EmailMessageResponse:
    if not service.verify(request_data.email, request_data.token):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired verification code",
        )
    return EmailMessageResponse(
        message="Email verification successful", email=request_data.email.strip().lower()
    )


@router.post(
    "/register/complete",
    response_model=AuthResponse,
    responses={400: {"model": ErrorResponse, "description": "No pending registration"}},
    summary="Complete registration",
    description="Set the password, create the account and log in.",
)
async def register_complete(
    request_data: RegisterCompleteRequest,
    request: Request,
    response: Response,
    service: RegistrationService = Depends(get_registration_service),
) -> AuthResponse:
    try:
        user = service.complete(request_data.email, request_data.password)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    _start_session(request, response, user)
    return AuthResponse(user=AuthUser(email=user.email, is_admin=user.is_admin))


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid email or password"},
        403: {"model": ErrorResponse, "description": "Account suspended"},
    },
)
async def login(
    request_data: LoginRequest,
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    try:
        user = service.login(request_data.email, request_data.password)
    except InvalidCredentials as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from None
    except AccountSuspended as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from None
    _start_session(request, response, user)
    return AuthResponse(user=AuthUser(email=user.email, is_admin=user.is_admin))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    session_id: str | None = Depends(get_session_id),
    sessions: SessionStore = Depends(get_session_store),
) -> MessageResponse:
    sessions.destroy(session_id)
    response.delete_cookie(request.app.state.settings.session_cookie_name)
    return MessageResponse(message="Logged out successfully")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        500: {"model": ErrorResponse, "description": "Code could not be delivered"},
    },
)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    try:
        service.request_password_reset(request_data.email)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        ) from None
    except DeliveryError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification email",
        ) from None
    return MessageResponse(message="Reset instructions sent to your email")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired reset code"}},
)
async def reset_password(
    request_data: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    try:
        service.reset_password(request_data.email, request_data.token, request_data.new_password)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return MessageResponse(message="Password reset successful")
