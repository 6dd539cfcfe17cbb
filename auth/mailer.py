"""
auth/mailer.py -- Outbound email transports.

Two transports share one shape, send(to, subject, body):
  ConsoleEmailSender -- writes the message to stdout and the log. Development
      default; nothing leaves the machine.
  SmtpEmailSender    -- plain-text message over SMTP with optional STARTTLS
      and login.

Both raise EmailDeliveryError on failure. There is no retry: one attempt,
failure surfaced synchronously to the workflow.

build_email_sender() picks the transport from Settings.email_provider.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from auth.errors import EmailDeliveryError
from core.config import Settings

logger = logging.getLogger("employeeauth.mailer")


class EmailSender(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class ConsoleEmailSender:
    def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Sending email via console to %s (subject: %s)", to, subject)
        print("----- EMAIL -----")
        print(f"To: {to}")
        print(f"Subject: {subject}")
        print(body)
        print("-----------------", flush=True)


class SmtpEmailSender:
    """Deliver plain-text mail through an SMTP relay.

    use_starttls upgrades the connection before authenticating. Login is
    skipped when no user is configured (open relays, local MTAs).
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        sender: str = "no-reply@employeeauth.local",
        user: str = "",
        password: str = "",
        use_starttls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        if not host:
            raise ValueError("SMTP host must be configured when EMAIL_PROVIDER=smtp")
        self._host = host
        self._port = port
        self._sender = sender
        self._user = user
        self._password = password
        self._use_starttls = use_starttls
        self._timeout = timeout

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Sending email via SMTP to %s (subject: %s)", to, subject)
        try:
            message = self._build_message(to, subject, body)
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as client:
                if self._use_starttls:
                    client.starttls()
                if self._user:
                    client.login(self._user, self._password)
                client.send_message(message)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            # ValueError: header injection (CR/LF) in an address or subject.
            logger.error("SMTP email send failed to %s: %s", to, exc)
            raise EmailDeliveryError(f"SMTP delivery to {to} failed: {exc}") from exc


def build_email_sender(settings: Settings) -> EmailSender:
    """Return the transport selected by EMAIL_PROVIDER."""
    if settings.email_provider == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.email_from,
            user=settings.smtp_user,
            password=settings.smtp_password,
            use_starttls=settings.smtp_use_starttls,
            timeout=settings.smtp_timeout,
        )
    return ConsoleEmailSender()
