"""Unit tests for auth/mailer.py -- email transports.

SMTP is exercised against a mocked smtplib.SMTP; nothing touches the network.
"""

import logging
import smtplib
from unittest.mock import patch

import pytest

from auth.errors import EmailDeliveryError
from auth.mailer import ConsoleEmailSender, SmtpEmailSender, build_email_sender
from core.config import Settings

KEY = "k" * 32


class TestConsoleEmailSender:
    def test_prints_message(self, capsys):
        ConsoleEmailSender().send("john@test.com", "Your account password", "Hello John")
        out = capsys.readouterr().out
        assert "To: john@test.com" in out
        assert "Subject: Your account password" in out
        assert "Hello John" in out

    def test_logs_recipient_not_body(self, caplog):
        with caplog.at_level(logging.INFO, logger="employeeauth.mailer"):
            ConsoleEmailSender().send("john@test.com", "Subject", "secret-body")
        assert "john@test.com" in caplog.text
        assert "secret-body" not in caplog.text


class TestSmtpEmailSender:
    def _sender(self, **overrides) -> SmtpEmailSender:
        kwargs = {
            "host": "smtp.test.local",
            "port": 2525,
            "sender": "noreply@test.local",
            "user": "mailer",
            "password": "pw",
        }
        kwargs.update(overrides)
        return SmtpEmailSender(**kwargs)

    def test_requires_host(self):
        with pytest.raises(ValueError):
            SmtpEmailSender(host="")

    @patch("auth.mailer.smtplib.SMTP")
    def test_sends_with_starttls_and_login(self, smtp_cls):
        client = smtp_cls.return_value.__enter__.return_value

        self._sender().send("john@test.com", "Subject", "Body text")

        smtp_cls.assert_called_once_with("smtp.test.local", 2525, timeout=10.0)
        client.starttls.assert_called_once()
        client.login.assert_called_once_with("mailer", "pw")
        message = client.send_message.call_args.args[0]
        assert message["To"] == "john@test.com"
        assert message["From"] == "noreply@test.local"
        assert message["Subject"] == "Subject"
        assert "Body text" in message.get_content()

    @patch("auth.mailer.smtplib.SMTP")
    def test_skips_starttls_and_login_when_unconfigured(self, smtp_cls):
        client = smtp_cls.return_value.__enter__.return_value

        self._sender(user="", use_starttls=False).send("john@test.com", "Subject", "Body")

        client.starttls.assert_not_called()
        client.login.assert_not_called()
        client.send_message.assert_called_once()

    @pytest.mark.parametrize(
        "failure",
        [
            smtplib.SMTPRecipientsRefused({"john@test.com": (550, b"no such user")}),
            smtplib.SMTPAuthenticationError(535, b"bad credentials"),
            ConnectionRefusedError("refused"),
        ],
    )
    @patch("auth.mailer.smtplib.SMTP")
    def test_failures_become_delivery_errors(self, smtp_cls, failure):
        client = smtp_cls.return_value.__enter__.return_value
        client.send_message.side_effect = failure

        with pytest.raises(EmailDeliveryError):
            self._sender().send("john@test.com", "Subject", "Body")

    @pytest.mark.parametrize("recipient", ["a@b.com\nBcc: x@evil.com", "a@b.com\r\nBcc: x@evil.com"])
    @patch("auth.mailer.smtplib.SMTP")
    def test_header_injection_becomes_delivery_error(self, smtp_cls, recipient):
        with pytest.raises(EmailDeliveryError):
            self._sender().send(recipient, "Subject", "Body")
        smtp_cls.return_value.__enter__.return_value.send_message.assert_not_called()

    @patch("auth.mailer.smtplib.SMTP", side_effect=OSError("unreachable"))
    def test_connect_failure_becomes_delivery_error(self, smtp_cls):
        with pytest.raises(EmailDeliveryError):
            self._sender().send("john@test.com", "Subject", "Body")


class TestBuildEmailSender:
    def test_console_by_default(self):
        settings = Settings(_env_file=None, secret_key=KEY)
        assert isinstance(build_email_sender(settings), ConsoleEmailSender)

    def test_smtp_when_selected(self):
        settings = Settings(_env_file=None, secret_key=KEY, email_provider="smtp", smtp_host="mail.local")
        sender = build_email_sender(settings)
        assert isinstance(sender, SmtpEmailSender)

    def test_smtp_without_host_fails_fast(self):
        settings = Settings(_env_file=None, secret_key=KEY, email_provider="smtp")
        with pytest.raises(ValueError):
            build_email_sender(settings)

