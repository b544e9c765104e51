# app/utils/email.py
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import List

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


class EmailSender:
    """SMTP delivery using the MAIL_* settings."""

    def __init__(self, config=settings):
        self.config = config

    def _build_message(
        self, recipients: List[str], subject: str, summary: str, body: str
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr(
            (self.config.mail_from_name, self.config.mail_from_address)
        )
        msg["To"] = ", ".join(recipients)
        msg.attach(MIMEText(summary, "plain", "utf-8"))
        msg.attach(MIMEText(body, "html", "utf-8"))
        return msg

    def send(self, recipients: List[str], subject: str, summary: str, body: str) -> None:
        """
        Deliver one message. Raises EmailDeliveryError on any SMTP failure.
        """
        if not recipients:
            raise EmailDeliveryError("No recipients")

        if not self.config.mail_enabled:
            logger.info(f"[mail disabled] '{subject}' -> {', '.join(recipients)}")
            return

        msg = self._build_message(recipients, subject, summary, body)
        host, port = self.config.mail_host, self.config.mail_port
        timeout = self.config.mail_timeout

        try:
            # Port 465 = SSL direct, otherwise STARTTLS when configured
            if self.config.mail_encryption == "ssl" or port == 465:
                server = smtplib.SMTP_SSL(host, port, timeout=timeout)
            else:
                server = smtplib.SMTP(host, port, timeout=timeout)

            with server:
                if self.config.mail_encryption == "tls" and port != 465:
                    server.starttls()
                if self.config.mail_password:
                    server.login(self.config.mail_username, self.config.mail_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(str(e)) from e

        logger.info(f"Email '{subject}' sent to {', '.join(recipients)}")


email_sender = EmailSender()
