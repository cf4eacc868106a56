"""
Report delivery by email, with a local file fallback.

Delivery is attempted a fixed number of times; when it keeps failing, or
no transport is configured, the HTML report is written to the reports
directory instead so a run never loses its output.
"""

import logging
import os
import smtplib
import time
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Callable, List, Optional

import requests

from .report import Report

logger = logging.getLogger(__name__)

SENDGRID_ENDPOINT = "https://api.sendgrid.com/v3/mail/send"
SUBJECT_TEMPLATE = "📡 Clipping Executivo – {date}"
FALLBACK_NAME = "relatorio-{date}.html"


class DeliveryError(Exception):
    """Raised by a transport when a message could not be sent."""


class SendGridTransport:
    """Sends mail through the SendGrid v3 HTTP API."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        sender_name: str = "Clipping NLC/PGE/SP",
        endpoint: str = SENDGRID_ENDPOINT,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.sender = sender
        self.sender_name = sender_name
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, recipients: List[str], subject: str, html_body: str) -> None:
        payload = {
            "personalizations": [
                {"to": [{"email": r} for r in recipients], "subject": subject}
            ],
            "from": {"email": self.sender, "name": self.sender_name},
            "content": [{"type": "text/html", "value": html_body}],
        }
        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise DeliveryError(f"SendGrid: {e}") from e


class SMTPTransport:
    """Sends mail through an SMTP server with STARTTLS."""

    def __init__(self, host: str, port: int, username: str, password: str, sender: str) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender

    def send(self, recipients: List[str], subject: str, html_body: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = ", ".join(recipients)
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                server.starttls()
                server.login(self.username, self.password)
                server.sendmail(self.sender, recipients, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP: {e}") from e


def build_transport(cfg):
    """Create the configured transport, or None when credentials are missing."""
    kind = cfg.get("delivery.transport", "sendgrid")
    sender = os.environ.get("EMAIL_FROM") or cfg.get("delivery.sender")

    if kind == "sendgrid":
        api_key = os.environ.get("SENDGRID_API_KEY")
        if not api_key or not sender:
            logger.error("SENDGRID_API_KEY or EMAIL_FROM not configured")
            return None
        return SendGridTransport(
            api_key=api_key,
            sender=sender,
            sender_name=cfg.get("delivery.sender_name", "Clipping NLC/PGE/SP"),
            endpoint=cfg.get("delivery.sendgrid_endpoint", SENDGRID_ENDPOINT),
            timeout=cfg.get("delivery.timeout", 30),
        )

    if kind == "smtp":
        host = os.environ.get("SMTP_HOST") or cfg.get("delivery.smtp_host")
        username = os.environ.get("SMTP_USERNAME")
        password = os.environ.get("SMTP_PASSWORD")
        if not (host and username and password):
            logger.error("SMTP credentials not set (SMTP_HOST, SMTP_USERNAME, SMTP_PASSWORD)")
            return None
        port = int(os.environ.get("SMTP_PORT") or cfg.get("delivery.smtp_port", 587))
        return SMTPTransport(host, port, username, password, sender or username)

    logger.error("Unknown delivery transport '%s'", kind)
    return None


def save_to_file(html: str, directory: Path, today: Optional[datetime] = None) -> Path:
    """
    Write the report HTML under a date-derived filename.

    Raises:
        OSError: If the file cannot be written.
    """
    today = today or datetime.now()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / FALLBACK_NAME.format(date=today.strftime("%Y-%m-%d"))
    path.write_text(html, encoding="utf-8")
    logger.info("Report saved to %s", path)
    return path


class Dispatcher:
    """Delivers reports, falling back to a local file."""

    def __init__(
        self,
        transport,
        recipients: List[str],
        fallback_dir: Path,
        subject_template: str = SUBJECT_TEMPLATE,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.transport = transport
        self.recipients = recipients
        self.fallback_dir = Path(fallback_dir)
        self.subject_template = subject_template
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    def subject_for(self, report: Report) -> str:
        return self.subject_template.format(date=report.generated_at.strftime("%d/%m/%Y"))

    def fallback(self, html: str, today: Optional[datetime] = None) -> Path:
        """Persist the report locally; failure here is logged as critical and re-raised."""
        try:
            return save_to_file(html, self.fallback_dir, today)
        except OSError:
            logger.critical("Could not save report to %s", self.fallback_dir, exc_info=True)
            raise

    def deliver(self, report: Report) -> bool:
        """
        Send the report, or save it locally after repeated failure.

        Returns:
            True if sent, False if the local fallback was used.
        """
        html = report.to_html()

        if self.transport is None or not self.recipients:
            logger.error("Delivery not configured; saving report locally")
            self.fallback(html, report.generated_at)
            return False

        subject = self.subject_for(report)
        for attempt in range(1, self.max_attempts + 1):
            try:
                self.transport.send(self.recipients, subject, html)
                logger.info("Report sent to %d recipients", len(self.recipients))
                return True
            except Exception as e:
                logger.error("Delivery attempt %d/%d failed: %s", attempt, self.max_attempts, e)
                if attempt < self.max_attempts:
                    self._sleep(self.retry_delay * attempt)

        self.fallback(html, report.generated_at)
        return False
