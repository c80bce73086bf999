"""Unit tests for auth/notifier.py -- SMTP delivery with smtplib mocked out."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from auth.errors import NotificationError
from auth.notifier import SmtpNotifier


@pytest.mark.asyncio
async def test_send_builds_and_delivers_message():
    notifier = SmtpNotifier(host="smtp.test", port=2525, username="user", password="pw")

    with patch("auth.notifier.smtplib.SMTP") as smtp_cls:
        server = smtp_cls.return_value.__enter__.return_value
        assert await notifier.send("from@x.com", "to@x.com", "Your code", "123456") is True

    smtp_cls.assert_called_once_with("smtp.test", 2525, timeout=10.0)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("user", "pw")
    msg = server.send_message.call_args.args[0]
    assert msg["From"] == "from@x.com"
    assert msg["To"] == "to@x.com"
    assert msg["Subject"] == "Your code"
    assert "123456" in msg.get_content()


@pytest.mark.asyncio
async def test_no_tls_and_no_login_when_not_configured():
    notifier = SmtpNotifier(host="smtp.test", use_tls=False)

    with patch("auth.notifier.smtplib.SMTP") as smtp_cls:
        server = smtp_cls.return_value.__enter__.return_value
        await notifier.send("from@x.com", "to@x.com", "s", "b")

    server.starttls.assert_not_called()
    server.login.assert_not_called()


@pytest.mark.asyncio
async def test_smtp_failure_raises_notification_error():
    notifier = SmtpNotifier(host="smtp.test")
    failing = MagicMock(side_effect=smtplib.SMTPConnectError(421, b"busy"))

    with patch("auth.notifier.smtplib.SMTP", failing):
        with pytest.raises(NotificationError):
            await notifier.send("from@x.com", "to@x.com", "s", "b")
