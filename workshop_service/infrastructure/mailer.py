import smtplib
from email.message import EmailMessage
from typing import Callable

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .metrics import notifications_total
from .models import UserORM
from ..application.notifications import INotifier
from ..config import settings

logger = structlog.get_logger()


class MailTransport:
    def send(self, message: EmailMessage) -> None: ...


class SmtpTransport(MailTransport):
    def __init__(self, host: str, port: int, username: str = "", password: str = "",
                 use_tls: bool = True, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(message)


class LoggingTransport(MailTransport):
    """Used when no SMTP host is configured (local development)."""

    def send(self, message: EmailMessage) -> None:
        logger.info(
            "mail_not_delivered",
            to=message["To"],
            subject=message["Subject"],
            reason="no smtp host configured",
        )


def build_transport() -> MailTransport:
    if not settings.SMTP_HOST:
        return LoggingTransport()
    return SmtpTransport(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
        timeout=settings.SMTP_TIMEOUT,
    )


class EmailNotifier(INotifier):
    """Best-effort email delivery to a user, looked up by id.

    Opens its own session: it runs as a background task, after the request
    session has been closed. Never raises; returns whether a message was
    handed to the transport.
    """

    def __init__(self, session_factory: Callable[[], Session], transport: MailTransport,
                 sender: str = settings.MAIL_FROM):
        self.session_factory = session_factory
        self.transport = transport
        self.sender = sender

    def notify(self, user_id: int, subject: str, body: str) -> bool:
        db = self.session_factory()
        try:
            user = db.get(UserORM, user_id)
            address = user.email if user else None
        except SQLAlchemyError as e:
            notifications_total.labels(outcome="failed").inc()
            logger.error("notification_failed", user_id=user_id, subject=subject, error=str(e))
            return False
        finally:
            db.close()

        if address is None:
            notifications_total.labels(outcome="user_missing").inc()
            logger.warning("notification_skipped_user_missing", user_id=user_id)
            return False

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = address
        message["Subject"] = subject
        message.set_content(body)

        try:
            self.transport.send(message)
        except Exception as e:
            notifications_total.labels(outcome="failed").inc()
            logger.error("notification_failed", user_id=user_id, subject=subject, error=str(e))
            return False

        notifications_total.labels(outcome="sent").inc()
        logger.info("notification_sent", user_id=user_id, subject=subject)
        return True
