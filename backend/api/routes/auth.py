"""Authentication endpoints: register, login, verify."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
    VerifyResponse,
)
from app.dependencies import AuthenticatedUser, get_current_user, get_db
from core.exceptions import ConflictError, UnauthorizedError
from services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisterResponse:
    """
    Register a new account with the default role.

    Roles are granted afterwards by an administrator.
    """
    auth_svc = AuthService(db)

    try:
        user = await auth_svc.register(
            username=request.username,
            password=request.password,
            email=request.email,
        )
    except ValueError as e:
        raise ConflictError(str(e))

    return RegisterResponse(user=UserResponse.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Authenticate with username and password.

    Returns a bearer token and the user it was issued for.
    """
    auth_svc = AuthService(db)
    result = await auth_svc.login(username=request.username, password=request.password)

    if not result:
        raise UnauthorizedError("Invalid credentials", error_code="invalid_credentials")

    return LoginResponse(
        token=result["token"],
        token_type=result["token_type"],
        user=UserResponse.model_validate(result["user"]),
    )


@router.get("/verify", response_model=VerifyResponse)
async def verify(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> VerifyResponse:
    """Check the presented token and report the caller as currently resolved."""
    return VerifyResponse(
        valid=True,
        user=UserResponse(
            id=current_user.id,
            username=current_user.username,
            email=current_user.email,
            role=current_user.role,
        ),
        token_role=current_user.token_role,
        role_changed=current_user.role_changed,
        expires_at=current_user.claims.exp,
    )
