"""Welcome email endpoint used by the app after client-side sign-up."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reconstruct.core.errors import ValidationFailure
from reconstruct.db.session import get_db
from reconstruct.models.user import User
from reconstruct.schemas.auth import WelcomeEmailSchema
from reconstruct.services import email as email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["email"])


@router.post("/send-welcome-email")
async def send_welcome_email(
    body: WelcomeEmailSchema,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    if not body.email or not body.name:
        raise ValidationFailure(
            "Missing required fields - email and name are required",
            required=["email", "name", "userId"],
        )

    # NotificationFailure propagates: here the email is the operation itself
    info = await email_service.send_welcome_email(body.email, body.name)

    if body.user_id:
        try:
            await db.execute(update(User).where(User.id == body.user_id).values(welcome_email_sent=True))
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Error updating email sent flag for user %s", body.user_id)

    return {
        "success": True,
        "message": "Welcome email sent successfully",
        "messageId": info.message_id,
    }
