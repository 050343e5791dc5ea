"""
tasks/notification_tasks.py
Celery tasks for transactional email.

Usage from a route:
    from tasks.notification_tasks import send_verification_email
    send_verification_email.delay(email, code, name)
"""

import logging

import resend

from config.settings import get_settings
from tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


VERIFICATION_TEMPLATE = """
<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: #0077B6; padding: 20px; border-radius: 8px 8px 0 0; text-align: center;">
        <h1 style="color: white; margin: 0;">{app_name}</h1>
    </div>
    <div style="background: white; padding: 24px; border: 1px solid #eee; border-radius: 0 0 8px 8px;">
        <p style="color: #333;">Hi {name},</p>
        <p style="color: #666; line-height: 1.6;">Your verification code is:</p>
        <p style="font-size: 28px; letter-spacing: 6px; font-weight: bold; color: #0077B6;">{code}</p>
        <p style="color: #999; font-size: 12px; margin-top: 24px;">
            If you did not create an account, you can ignore this email.
        </p>
    </div>
</div>
"""


def _send_email(to_email: str, to_name: str, subject: str, html_body: str) -> bool:
    """Send an email via Resend. Returns False when delivery is not configured."""
    settings = get_settings()
    if not settings.RESEND_API_KEY:
        logger.info("RESEND_API_KEY not set; skipping email to %s", to_email)
        return False

    resend.api_key = settings.RESEND_API_KEY
    resend.Emails.send({
        "from": f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM}>",
        "to": [f"{to_name} <{to_email}>"],
        "subject": subject,
        "html": html_body,
    })
    return True


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def send_verification_email(self, email: str, code: str, name: str):
    """Deliver the registration verification code with retry on failure."""
    settings = get_settings()
    html_body = VERIFICATION_TEMPLATE.format(app_name=settings.APP_NAME, name=name, code=code)
    try:
        sent = _send_email(email, name, "Verify your email", html_body)
    except Exception as exc:
        logger.warning("Verification email to %s failed: %s", email, exc)
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))
    if sent:
        logger.info("Verification email sent to %s", email)
    return sent
