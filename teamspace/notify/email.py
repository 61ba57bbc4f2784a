import logging
import smtplib
from email.message import EmailMessage

from teamspace.config import settings

logger = logging.getLogger(__name__)

def smtp_is_configured() -> bool:
    return bool(settings.smtp_host and settings.smtp_from)

def send_email(subject: str, body: str, to_email: str) -> bool:
    # False means "not delivered"; callers fall back to another channel
    if not smtp_is_configured():
        logger.warning("email not configured, skipping delivery to %s", to_email)
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = f'"{settings.app_name}" <{settings.smtp_from}>'
    msg["To"] = to_email
    msg.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls()
            if settings.smtp_user:
                smtp.login(settings.smtp_user, settings.smtp_password or "")
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError):
        logger.exception("failed to send email to %s", to_email)
        return False

    logger.info("email sent to %s", to_email)
    return True

def send_invitation_email(
    to: str,
    organization_name: str,
    inviter_name: str,
    invite_link: str,
    role: str,
) -> bool:
    subject = f"You're invited to join {organization_name}"
    body = (
        f"{inviter_name} has invited you to join {organization_name} on {settings.app_name} as {role}.\n\n"
        f"Accept your invitation by visiting:\n{invite_link}\n\n"
        f"This invitation will expire in {settings.invitation_expires_days} days.\n\n"
        "If you didn't expect this invitation, you can safely ignore this email.\n"
    )
    return send_email(subject, body, to)
