"""
auth/notifier.py -- Outbound email delivery for reset codes.

SmtpNotifier builds a plain-text email.message.EmailMessage and hands it to
smtplib. smtplib is blocking, so send() runs in asyncio.to_thread.

Failures are NOT swallowed: any SMTP or socket error is re-raised as
NotificationError so the forget-password flow reports a system failure
instead of claiming the code was sent.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from auth.errors import NotificationError

logger = logging.getLogger("guardian.auth")


class SmtpNotifier:
    """Send one email per call through an SMTP relay.

    Usage:
        notifier = SmtpNotifier(host="smtp.example.com", port=587, username="u", password="p")
        await notifier.send("from@example.com", "to@example.com", "Subject", "Body")
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self._password = password
        self.use_tls = use_tls
        self.timeout = timeout

    async def send(self, sender: str, to: str, subject: str, body: str) -> bool:
        msg = EmailMessage()
        msg["From"] = sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        await asyncio.to_thread(self._deliver, msg)
        return True

    def _deliver(self, msg: EmailMessage) -> None:
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self._password:
                    server.login(self.username, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP delivery via %s:%d failed: %s", self.host, self.port, exc)
            raise NotificationError(f"could not deliver email to {msg['To']}") from exc
