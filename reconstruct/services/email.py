"""Welcome email over SMTP."""
import logging
import smtplib
import ssl
import time
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid, parseaddr

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from reconstruct.core.config import Settings, get_settings
from reconstruct.core.errors import NotificationFailure
from reconstruct.models.user import User

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "You're in - welcome to Reconstruct!"
UNSUBSCRIBE_ADDRESS = "unsubscribe@reconstruct.com"

WELCOME_TEXT = """\
Welcome to Reconstruct, {name}!

Thank you for joining our community. We're excited to have you on board!

With Reconstruct, you can:
- Plan and organize your tasks efficiently
- Track your progress with the vision board, calendar and weekly planner
- Use the mind tools to reset when things get heavy

If you have any questions or need assistance, feel free to contact our support team.

Best regards,
The Reconstruct Team

To unsubscribe from these emails, reply with "Unsubscribe" in the subject line.
"""

WELCOME_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Welcome to Reconstruct</title></head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; line-height: 1.5; color: #333;">
  <p>Hi,</p>
  <h2 style="color: #2a5885;">Welcome to Reconstruct, {name}!</h2>
  <p>Thank you for joining our community! We're so excited to have you here.</p>
  <p>Reconstruct is your personal space to build mental strength, stay on top of things,
  and feel your best every day.</p>
  <ul>
    <li><strong>Explore your personal dashboard</strong>: track your progress, set goals and use the
    vision board, thought shredder and mood tracker. <a href="https://reconstructyourmind.com/login.php">Check it out</a></li>
    <li><strong>Stay connected on the go</strong>: <a href="https://play.google.com/store/apps/details?id=com.reconstrect.visionboard">Get the App</a></li>
    <li><strong>Join the conversation</strong>: <a href="https://www.instagram.com/reconstruct_now/">Follow Us</a></li>
  </ul>
  <p>Happy Reconstructing!<br>Team Reconstruct</p>
  <p style="font-size: 12px; color: #999;">To unsubscribe from these emails,
  <a href="mailto:{unsubscribe}?subject=Unsubscribe&body={email}">click here</a>.</p>
</body>
</html>
"""


@dataclass
class DeliveryInfo:
    message_id: str
    recipient: str


def build_welcome_message(email: str, name: str, settings: Settings) -> EmailMessage:
    sender_address = parseaddr(settings.email_sender)[1]
    message = EmailMessage()
    message["Subject"] = WELCOME_SUBJECT
    message["From"] = settings.email_sender
    message["To"] = email
    message["Reply-To"] = settings.support_email or sender_address
    message["Message-ID"] = make_msgid(domain=sender_address.rpartition("@")[2] or None)
    # Unique per send so mail clients don't thread welcome emails together
    message["X-Entity-Ref-ID"] = f"welcome-{int(time.time() * 1000)}-{email[:5]}"
    message["List-Unsubscribe"] = f"<mailto:{UNSUBSCRIBE_ADDRESS}?subject=Unsubscribe&body={email}>"
    message["Precedence"] = "Bulk"
    message.set_content(WELCOME_TEXT.format(name=name))
    message.add_alternative(
        WELCOME_HTML.format(name=name, email=email, unsubscribe=UNSUBSCRIBE_ADDRESS), subtype="html"
    )
    return message


def _deliver(message: EmailMessage, settings: Settings) -> None:
    context = ssl.create_default_context()
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout) as server:
        server.ehlo()
        if settings.smtp_use_tls:
            server.starttls(context=context)
            server.ehlo()
        if settings.smtp_username and settings.smtp_password:
            server.login(settings.smtp_username, settings.smtp_password)
        server.send_message(message)


async def send_welcome_email(email: str, name: str) -> DeliveryInfo:
    """Send the welcome email; raise NotificationFailure on any delivery problem."""
    settings = get_settings()
    if not settings.smtp_host:
        raise NotificationFailure("Failed to send welcome email", "SMTP is not configured")

    message = build_welcome_message(email, name, settings)
    try:
        await run_in_threadpool(_deliver, message, settings)
    except (smtplib.SMTPException, OSError) as exc:
        raise NotificationFailure("Failed to send welcome email", str(exc)) from exc

    logger.info("Welcome email sent to %s (%s)", email, message["Message-ID"])
    return DeliveryInfo(message_id=message["Message-ID"], recipient=email)


async def deliver_welcome_once(db: AsyncSession, user: User) -> bool:
    """Send the welcome email if it was never sent; failures are logged, never raised."""
    if user.welcome_email_sent:
        logger.debug("Welcome email already sent to %s, skipping", user.email)
        return False
    try:
        await send_welcome_email(user.email, user.name)
    except NotificationFailure as exc:
        logger.warning("Error sending welcome email to %s: %s", user.email, exc.error or exc.message)
        return False

    user_id = user.id
    user.welcome_email_sent = True
    try:
        await db.commit()
    except SQLAlchemyError:
        logger.exception("Error updating welcome email flag for user %s", user_id)
        await db.rollback()
        # rollback expired the instance
        await db.refresh(user)
        return False

    logger.info("Welcome email flag updated for user %s", user_id)
    return True
