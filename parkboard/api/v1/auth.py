import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from parkboard.core.dependencies import DB, ActiveUser
from parkboard.core.exceptions import AuthenticationError
from parkboard.core.rate_limit import limit_login, limit_signup
from parkboard.core.security import decode_token
from parkboard.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    Token,
    TokenRefresh,
)
from parkboard.schemas.user import UserResponse
from parkboard.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_signup)],
)
async def register(db: DB, data: RegisterRequest):
    user, token = await auth_service.register_user(db, data)
    return RegisterResponse(
        user=user,
        access_token=token.access_token,
        refresh_token=token.refresh_token,
    )


@router.post("/login", response_model=Token, dependencies=[Depends(limit_login)])
async def login(db: DB, form_data: Annotated[OAuth2PasswordRequestForm, Depends()]):
    # The OAuth2 form calls it "username"; accounts are keyed by email.
    data = LoginRequest(email=form_data.username, password=form_data.password)
    return await auth_service.authenticate_user(db, data)


@router.post("/refresh", response_model=Token)
async def refresh_token(db: DB, data: TokenRefresh):
    payload = decode_token(data.refresh_token)
    if not payload or payload.get("type") != "refresh":
        raise AuthenticationError("Invalid refresh token")

    try:
        user_id = uuid.UUID(payload.get("sub", ""))
    except ValueError:
        raise AuthenticationError("Invalid refresh token") from None
    return await auth_service.refresh_access_token(db, user_id)


@router.get("/me", response_model=UserResponse)
async def get_current_user(current_user: ActiveUser):
    return UserResponse.model_validate(current_user)
