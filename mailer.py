import logging
import smtplib
from email.message import EmailMessage

from flask import current_app

logger = logging.getLogger(__name__)


def _deliver(to_address, subject, body):
    config = current_app.config
    if not config.get('MAIL_SERVER'):
        logger.info("MAIL_SERVER not set; email to %s not sent:\n%s", to_address, body)
        return True

    message = EmailMessage()
    message['Subject'] = subject
    message['From'] = config['MAIL_SENDER']
    message['To'] = to_address
    message.set_content(body)
    try:
        with smtplib.SMTP(config['MAIL_SERVER'], config['MAIL_PORT'], timeout=10) as smtp:
            smtp.starttls()
            if config.get('MAIL_USERNAME'):
                smtp.login(config['MAIL_USERNAME'], config['MAIL_PASSWORD'])
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email to %s: %s", to_address, exc)
        return False
    logger.info("Sent '%s' email to %s", subject, to_address)
    return True


def _link(path, token):
    return f"{current_app.config['APP_URL'].rstrip('/')}{path}?token={token}"


def send_verification_email(user, token):
    hours = current_app.config['VERIFY_TOKEN_HOURS']
    body = (
        f"Hi {user.full_name or user.email.split('@')[0]},\n\n"
        f"Confirm your FinFlow account by opening this link:\n{_link('/auth/verify', token)}\n\n"
        f"The link expires in {hours} hours."
    )
    return _deliver(user.email, "Verify your FinFlow account", body)


def send_password_reset_email(user, token):
    hours = current_app.config['RESET_TOKEN_HOURS']
    body = (
        f"Hi {user.full_name or user.email.split('@')[0]},\n\n"
        f"Reset your FinFlow password here:\n{_link('/reset-password', token)}\n\n"
        f"The link expires in {hours} hour(s). Ignore this email if you did not ask for it."
    )
    return _deliver(user.email, "Reset your FinFlow password", body)
