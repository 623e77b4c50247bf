import logging
import smtplib
import ssl
from email.message import EmailMessage

from ceresense.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class EmailNotifier:
    """
    Sends transactional HTML mail over SMTP.

    With MAIL_ENABLED off the message is written to the log instead, which is
    how OTP codes reach developers locally. ``send`` never raises: it returns
    False when delivery failed so callers can decide whether that is fatal.
    """

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings

    def send(self, to_email: str, subject: str, html: str) -> bool:
        if not self.settings.MAIL_ENABLED:
            logger.info("=" * 60)
            logger.info(f"[EMAIL]  To      : {to_email}")
            logger.info(f"[EMAIL]  Subject : {subject}")
            logger.info(f"[EMAIL]  Body    : {html}")
            logger.info("=" * 60)
            return True

        if not self.settings.MAIL_HOST:
            logger.error("MAIL_ENABLED is set but MAIL_HOST is empty")
            return False

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.MAIL_FROM
        msg["To"] = to_email
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")

        try:
            self._deliver(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception(f"Failed to send email '{subject}' to {to_email}")
            return False
        logger.info(f"Email '{subject}' sent to {to_email}")
        return True

    def _deliver(self, msg: EmailMessage) -> None:
        cfg = self.settings
        if cfg.MAIL_USE_SSL:
            with smtplib.SMTP_SSL(cfg.MAIL_HOST, cfg.MAIL_PORT, timeout=cfg.MAIL_TIMEOUT,
                                  context=ssl.create_default_context()) as client:
                if cfg.MAIL_USERNAME:
                    client.login(cfg.MAIL_USERNAME, cfg.MAIL_PASSWORD)
                client.send_message(msg)
        else:
            with smtplib.SMTP(cfg.MAIL_HOST, cfg.MAIL_PORT, timeout=cfg.MAIL_TIMEOUT) as client:
                if cfg.MAIL_USE_TLS:
                    client.starttls(context=ssl.create_default_context())
                if cfg.MAIL_USERNAME:
                    client.login(cfg.MAIL_USERNAME, cfg.MAIL_PASSWORD)
                client.send_message(msg)


# ─── Message bodies ───────────────────────────────────────────────────────────
def otp_email_html(full_name: str, otp_code: str, expire_minutes: int) -> str:
    return f"""
      <h2>Password Reset Request</h2>
      <p>Hello {full_name},</p>
      <p>Use the following code to reset your password:</p>
      <p style="font-size: 24px; font-weight: bold; letter-spacing: 4px;">{otp_code}</p>
      <p>This code will expire in {expire_minutes} minutes.</p>
      <p>If you didn't request this, please ignore this email.</p>
    """


def reset_confirmation_html(full_name: str) -> str:
    return f"""
      <h2>Password Reset Successful</h2>
      <p>Hello {full_name},</p>
      <p>Your password has been successfully reset.</p>
      <p>If you did not perform this action, please contact support immediately.</p>
    """


email_notifier = EmailNotifier()
