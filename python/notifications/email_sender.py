"""
Email Notification Module

Sends budget alert emails over SMTP.
"""

import logging
import os
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from html import escape

from budget.alert_checker import BudgetAlert
from budget.advisory_classifier import CurrencyFormatter

logger = logging.getLogger(__name__)


@dataclass
class SMTPSettings:
    """SMTP connection settings."""

    host: str | None
    port: int = 587
    username: str | None = None
    password: str | None = None
    sender: str = "Finance Tracker <no-reply@localhost>"
    use_tls: bool = True
    timeout: int = 20

    @classmethod
    def from_env(cls) -> "SMTPSettings":
        username = os.getenv("SMTP_USER")
        return cls(
            host=os.getenv("SMTP_HOST"),
            port=int(os.getenv("SMTP_PORT", "587")),
            username=username,
            password=os.getenv("SMTP_PASSWORD"),
            sender=os.getenv("EMAIL_FROM") or (
                f"Finance Tracker <{username}>" if username else "Finance Tracker <no-reply@localhost>"
            ),
            use_tls=os.getenv("SMTP_TLS", "true").lower() != "false",
        )


class EmailSender:
    """Formats and delivers notification emails."""

    def __init__(
        self,
        settings: SMTPSettings | None = None,
        formatter: CurrencyFormatter | None = None
    ):
        """Initialize the sender.

        Args:
            settings: SMTP settings (read from environment if omitted)
            formatter: Currency formatter for amounts
        """
        self.settings = settings or SMTPSettings.from_env()
        self.formatter = formatter or CurrencyFormatter()

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.host)

    def build_budget_alert(
        self,
        alert: BudgetAlert,
        to_address: str,
        user_name: str
    ) -> EmailMessage:
        """Build the budget alert email.

        Args:
            alert: Triggered budget alert
            to_address: Recipient email
            user_name: Recipient display name

        Returns:
            EmailMessage
        """
        category = alert.category
        spent = self.formatter.format(alert.spent)
        budget = self.formatter.format(alert.budget_amount)

        text = (
            f"Hi {user_name},\n\n"
            f"You have spent {alert.percent_spent}% of your budget for the {category} "
            f"category this month ({spent} of {budget}).\n"
            f"You might want to review your recent transactions to stay on track.\n\n"
            f"Best regards,\nThe Finance Tracker Team\n"
        )
        html = (
            '<div style="font-family: Arial, sans-serif; line-height: 1.6;">'
            f"<h2>Hi {escape(user_name)},</h2>"
            f"<p>You have spent <strong>{alert.percent_spent}%</strong> of your budget for the "
            f"<strong>{escape(category)}</strong> category this month "
            f"({escape(spent)} of {escape(budget)}).</p>"
            "<p>You might want to review your recent transactions to stay on track.</p>"
            "<p>Best regards,<br>The Finance Tracker Team</p>"
            "</div>"
        )

        message = EmailMessage()
        message["Subject"] = f"Budget Alert: High Spending in {category}"
        message["From"] = self.settings.sender
        message["To"] = to_address
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    def send_budget_alert(self, alert: BudgetAlert, to_address: str, user_name: str) -> bool:
        """Send a budget alert email.

        Returns:
            True if the message was handed to the SMTP server
        """
        if not to_address:
            logger.warning(f"No email address for user {alert.user_id}, alert not sent")
            return False

        return self.send_message(self.build_budget_alert(alert, to_address, user_name))

    def send_message(self, message: EmailMessage) -> bool:
        """Deliver a message, logging instead of raising on failure.

        Args:
            message: Message to send

        Returns:
            True on success
        """
        if not self.is_configured:
            logger.info(f"SMTP not configured, skipping email to {message['To']}")
            return False

        try:
            with smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.settings.timeout) as smtp:
                smtp.ehlo()
                if self.settings.use_tls:
                    smtp.starttls(context=ssl.create_default_context())
                    smtp.ehlo()
                if self.settings.username:
                    smtp.login(self.settings.username, self.settings.password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {message['To']}: {e}")
            return False

        logger.info(f"Email sent to {message['To']}: {message['Subject']}")
        return True
