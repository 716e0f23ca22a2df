"""Render check reports and deliver them."""

import json
import os
import smtplib
from email.mime.text import MIMEText
from itertools import groupby

import httpx
import structlog

from .errors import NotificationError
from .models import CheckReport

log = structlog.get_logger("debby.notify")


def render_text(report: CheckReport) -> str:
    """Format a report as plain text, grouped by manager."""
    if not report.has_updates and not report.has_failures:
        return f"All packages in {report.root} are up to date."

    lines = []
    if report.has_updates:
        lines.append(f"Updatable packages in {report.root}:")
        for manager, results in groupby(report.results, key=lambda result: result.manager):
            lines.append("")
            lines.append(f"{manager}:")
            for result in results:
                lines.append(
                    f"  {result.name}: {result.installed_version} -> {result.updatable_version}"
                    f" (requires {result.required_version})"
                )
    else:
        lines.append(f"No updatable packages found in {report.root}.")

    if report.has_failures:
        lines.append("")
        lines.append(render_failures(report))

    return "\n".join(lines)


def render_failures(report: CheckReport) -> str:
    """Format the managers that could not be checked."""
    lines = ["Failed checks:"]
    for failure in report.failures:
        lines.append(f"  {failure.manager}: {failure.message}")
    return "\n".join(lines)


def render_json(report: CheckReport) -> str:
    """Format a report as JSON."""
    return json.dumps(report.to_dict(), indent=2)


def subject_for(report: CheckReport) -> str:
    count = len(report.results)
    noun = "package" if count == 1 else "packages"
    subject = f"debby: {count} updatable {noun} in {report.root}"
    if report.has_failures:
        subject += f", {len(report.failures)} failed"
    return subject


class EmailNotifier:
    """Sends a text report over SMTP, using STARTTLS when logging in."""

    def __init__(
        self,
        address: str,
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        from_addr: str | None = None,
    ):
        self.address = address
        self.host = host or os.getenv("DEBBY_SMTP_HOST", "localhost")
        self.port = port or int(os.getenv("DEBBY_SMTP_PORT", "25"))
        self.user = user or os.getenv("DEBBY_SMTP_USER", "")
        self.password = password or os.getenv("DEBBY_SMTP_PASSWORD", "")
        self.from_addr = from_addr or os.getenv("DEBBY_SMTP_FROM", "") or self.user or self.address

    def notify(self, report: CheckReport, always: bool = False) -> bool:
        """Send the report; returns False when there was nothing to send."""
        if not always and not report.has_updates and not report.has_failures:
            return False

        msg = MIMEText(render_text(report), "plain", "utf-8")
        msg["Subject"] = subject_for(report)
        msg["From"] = self.from_addr
        msg["To"] = self.address

        try:
            with smtplib.SMTP(self.host, self.port) as server:
                if self.user:
                    server.starttls()
                    server.login(self.user, self.password)
                server.sendmail(self.from_addr, [self.address], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"can not send report to {self.address}: {e}") from e

        log.info("notify.email_sent", to=self.address, updates=len(report.results))
        return True


class WebhookNotifier:
    """Posts the report as JSON to a webhook URL."""

    def __init__(self, url: str, timeout: float = 30.0):
        self.url = url
        self.timeout = timeout

    def notify(self, report: CheckReport) -> None:
        try:
            response = httpx.post(self.url, json=report.to_dict(), timeout=self.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise NotificationError(f"timeout posting report to {self.url}") from e
        except httpx.HTTPStatusError as e:
            raise NotificationError(
                f"webhook {self.url} answered {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise NotificationError(f"can not post report to {self.url}: {e}") from e

        log.info("notify.webhook_sent", url=self.url, updates=len(report.results))
