"""Session endpoints (/auth/*).

Login and signup set an HttpOnly cookie carrying the session JWT; the
browser sends it back on every request and require_user reads it.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from lms.api.dependencies import AdminUser, CurrentUser, StoreDep
from lms.api.ratelimit import require_rate_limit
from lms.api.schemas import MessageOut, UserOut
from lms.core.config import SETTINGS
from lms.core.errors import NotFoundError
from lms.models.user import User
from lms.services import auth_service
from lms.services.rate_limiter import LOGIN_LIMIT, SIGNUP_LIMIT
from lms.services.token_service import tokens

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# --- Request / Response schemas -------------------------------------------


class LoginIn(BaseModel):
    email: str
    password: str


class SignupIn(BaseModel):
    name: str
    email: str
    password: str


class ChangePasswordIn(BaseModel):
    currentPassword: str
    newPassword: str


class ProfileIn(BaseModel):
    name: str
    email: str
    phone: str | None = None


class AuthResponse(BaseModel):
    user: UserOut


def _set_session_cookie(response: Response, user: User) -> None:
    response.set_cookie(
        key=SETTINGS.session_cookie_name,
        value=tokens.create_session_token(user),
        max_age=int(tokens.ttl.total_seconds()),
        httponly=True,
        secure=SETTINGS.cookie_secure,
        samesite="lax",
        path="/",
    )


# --- POST /auth/login -----------------------------------------------------


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(require_rate_limit("login", LOGIN_LIMIT))],
)
async def login(payload: LoginIn, response: Response, store: StoreDep) -> AuthResponse:
    user = await auth_service.authenticate_user(
        store.users, payload.email, payload.password
    )
    if user is None:
        logger.warning("Login failed  email=%s", payload.email.strip().lower())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid email or password"},
        )

    _set_session_cookie(response, user)
    logger.info("Login succeeded  user_id=%s role=%s", user.id, user.role)
    return AuthResponse(user=UserOut.from_user(user))


# --- POST /auth/signup ----------------------------------------------------


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_rate_limit("signup", SIGNUP_LIMIT))],
)
async def signup(
    payload: SignupIn, response: Response, store: StoreDep
) -> AuthResponse:
    user = await auth_service.register_student(
        store.users,
        email=payload.email,
        password=payload.password,
        name=payload.name,
    )
    _set_session_cookie(response, user)
    logger.info("Student signed up  user_id=%s", user.id)
    return AuthResponse(user=UserOut.from_user(user))


# --- POST /auth/logout ----------------------------------------------------


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout() -> Response:
    """Clear the session cookie.  Idempotent; needs no valid session."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(SETTINGS.session_cookie_name, path="/")
    return response


# --- GET /auth/me ---------------------------------------------------------


@router.get("/me", response_model=UserOut)
async def me(principal: CurrentUser, store: StoreDep) -> UserOut:
    user = await store.users.get_by_id(principal.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserOut.from_user(user)


# --- POST /auth/change-password -------------------------------------------


@router.post("/change-password", response_model=MessageOut)
async def change_password(
    payload: ChangePasswordIn, principal: CurrentUser, store: StoreDep
) -> MessageOut:
    await auth_service.change_password(
        store.users,
        principal.user_id,
        payload.currentPassword,
        payload.newPassword,
    )
    return MessageOut(message="Password changed successfully")


# --- PUT /auth/profile ----------------------------------------------------


@router.put("/profile", response_model=UserOut)
async def update_profile(
    payload: ProfileIn, admin: AdminUser, store: StoreDep
) -> UserOut:
    """An admin edits their own name, email and phone."""
    user = await auth_service.update_profile(
        store.users,
        admin.user_id,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
    )
    logger.info("Profile updated  user_id=%s", user.id)
    return UserOut.from_user(user)
