"""SMTP notifier — delivers email through a mail relay with aiosmtplib.

Configured from the environment:

    MAIL_HOST, MAIL_PORT   relay address (port 465 uses implicit TLS, others STARTTLS)
    MAIL_USER, MAIL_PASS   optional login
    MAIL_FROM              sender address, defaults to MAIL_USER

The notifier port is synchronous, so each send drives the async client on a
private event loop. When the caller is itself inside a running loop, that
private loop runs in a worker thread instead.
"""

import asyncio
import os
import ssl
from concurrent.futures import ThreadPoolExecutor
from email.message import EmailMessage

import aiosmtplib
import structlog

from ordering.notifier.port import Notifier

logger = structlog.get_logger(__name__)

_IMPLICIT_TLS_PORT = 465


def _run(coro):
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


class SmtpNotifier(Notifier):
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> "SmtpNotifier":
        host = os.getenv("MAIL_HOST")
        if not host:
            raise ValueError("MAIL_HOST must be set to use the SMTP notifier")
        return cls(
            host=host,
            port=int(os.getenv("MAIL_PORT", "587")),
            username=os.getenv("MAIL_USER"),
            password=os.getenv("MAIL_PASS"),
            sender=os.getenv("MAIL_FROM"),
        )

    @property
    def implicit_tls(self) -> bool:
        return self.port == _IMPLICIT_TLS_PORT

    def build_message(self, to: str, subject: str, text: str, html: str | None = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    async def deliver(self, message: EmailMessage) -> None:
        """Open a connection, log in when credentials are set, and send ``message``."""
        smtp = aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            use_tls=self.implicit_tls,
            start_tls=not self.implicit_tls,
            timeout=self.timeout,
            tls_context=ssl.create_default_context(),
        )
        async with smtp:
            if self.username and self.password:
                await smtp.login(self.username, self.password)
            await smtp.send_message(message)

    def send(
        self,
        to: str,
        subject: str,
        text: str,
        html: str | None = None,
    ) -> bool:
        try:
            message = self.build_message(to, subject, text, html)
            _run(self.deliver(message))
        except (aiosmtplib.SMTPException, OSError, ValueError) as exc:
            logger.warning(
                "Email delivery failed",
                to=to,
                subject=subject,
                mail_host=self.host,
                error=str(exc),
            )
            return False

        logger.info("Email sent", to=to, subject=subject)
        return True
