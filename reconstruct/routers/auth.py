"""Auth routes: register, login, Google sign-in, profile. JWT bearer tokens."""
from __future__ import annotations

import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reconstruct.core.errors import AuthenticationFailure, ValidationFailure
from reconstruct.core.identity import get_current_user
from reconstruct.core.security import (
    MAX_PASSWORD_BYTES,
    MIN_PASSWORD_LENGTH,
    create_access_token,
    hash_password,
    verify_password,
)
from reconstruct.db.session import get_db
from reconstruct.models.user import User
from reconstruct.schemas.auth import GoogleSignInSchema, LoginSchema, RegisterSchema, UserOutSchema
from reconstruct.services.email import deliver_welcome_once

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _user_out(user: User) -> dict:
    return jsonable_encoder(UserOutSchema.model_validate(user))


def _issue_token(user: User) -> str:
    return create_access_token(user.id, extra={"id": user.id, "email": user.email})


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailure(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationFailure(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


async def _find_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


@router.post("/register")
async def register(
    body: RegisterSchema,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a password user, issue a token and send the welcome email."""
    if not body.username or not body.email or not body.password:
        raise ValidationFailure("Missing required fields", required=["username", "email", "password"])

    email = _normalize_email(body.email)
    if not EMAIL_RE.match(email):
        raise ValidationFailure("Invalid email address")
    _check_password(body.password)

    if await _find_by_email(db, email):
        raise ValidationFailure("Email already in use")

    user = User(name=body.username.strip(), email=email, password_hash=hash_password(body.password))
    db.add(user)
    await db.commit()
    logger.info("New user registered: %s (ID: %s)", user.email, user.id)

    await deliver_welcome_once(db, user)

    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "message": "Registration successful",
            "user": _user_out(user),
            "token": _issue_token(user),
        },
    )


@router.post("/login")
async def login(
    body: LoginSchema,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Check email/password and issue a token; sends the welcome email if it never went out."""
    user = await _find_by_email(db, _normalize_email(body.email))
    if not user or not verify_password(body.password or "", user.password_hash):
        raise AuthenticationFailure("Invalid email or password")

    logger.info("User logged in: %s (ID: %s)", user.email, user.id)
    await deliver_welcome_once(db, user)

    return {
        "success": True,
        "message": "Login successful",
        "user": _user_out(user),
        "token": _issue_token(user),
    }


@router.post("/google")
async def google_sign_in(
    body: GoogleSignInSchema,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create or refresh a user from a Firebase/Google sign-in."""
    email = _normalize_email(body.email)
    if not EMAIL_RE.match(email):
        raise ValidationFailure("Invalid email address")

    password_hash = None
    if body.password and body.wants_password_stored:
        _check_password(body.password)
        password_hash = hash_password(body.password)

    display_name = body.display_name or email.split("@", 1)[0]
    user = await _find_by_email(db, email)
    if user is not None:
        user.name = display_name
        user.firebase_uid = body.firebase_uid
        if password_hash:
            user.password_hash = password_hash
        logger.info("Existing user signed in with Google: %s (ID: %s)", email, user.id)
    else:
        user = User(name=display_name, email=email, firebase_uid=body.firebase_uid, password_hash=password_hash)
        db.add(user)
        logger.info("New user created from Google sign-in: %s", email)
    await db.commit()

    await deliver_welcome_once(db, user)

    return {
        "success": True,
        "message": "Google authentication successful",
        "user": _user_out(user),
        "token": _issue_token(user),
        "passwordStored": password_hash is not None,
    }


@router.get("/profile")
async def profile(user: Annotated[User, Depends(get_current_user)]):
    return {"success": True, "message": "Profile retrieved", "user": _user_out(user)}
