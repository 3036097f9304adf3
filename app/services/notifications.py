"""
Confirmation email delivery.

``EmailNotifier`` renders the registration summary and sends it over SMTP
with ``aiosmtplib``. Failures surface as ``TransportError`` so the
registration workflow can report them without undoing the stored record.
"""
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional

import aiosmtplib

from app import config
from app.errors import TransportError
from app.models.registration import Registration

logger = logging.getLogger(__name__)

SUBJECT = "Thank You for Registering at HIET Tech Fest!"

EVENT_RULES = [
    "All participants must carry a valid ID and their registration receipt on the event day.",
    "Teams must arrive 30 minutes prior to the event start time for check-in.",
    "No changes to team composition or size are allowed after registration.",
    "Participants must adhere to the event schedule and guidelines provided on-site.",
    "Any form of malpractice or violation of rules will result in disqualification.",
]


def confirmation_link(registration_id: str, base_url: Optional[str] = None) -> str:
    return f"{(base_url or config.PUBLIC_BASE_URL).rstrip('/')}/api/confirm/{registration_id}"


def render_confirmation(registration: Registration, link: str, support_email: str) -> str:
    rows = [
        ("Registration No", registration.registration_id),
        ("Team Name", registration.team_name),
        ("Team Leader Name", registration.team_leader_name),
        ("Email ID", registration.email),
        ("Mobile No", registration.mobile),
        ("Event Type", config.EVENTS.get(registration.event, registration.event)),
        ("Team Size", registration.team_size),
        ("College", registration.college),
        ("Course", registration.course),
        ("Year", registration.year),
        ("Aadhar No", registration.aadhar),
    ]
    cell = 'style="padding: 10px; border: 1px solid #ddd;"'
    table_rows = "\n".join(
        f"<tr><td {cell}>{escape(label)}</td><td {cell}>{escape(str(value))}</td></tr>"
        for label, value in rows
    )
    rules = "\n".join(f"<li>{escape(rule)}</li>" for rule in EVENT_RULES)

    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
      <h2 style="color: #4F46E5; text-align: center;">Thank You for Registering!</h2>
      <p>Dear {escape(registration.team_leader_name)},<br><br>
        Thank you for registering for our Tech Fest at HIET Ghaziabad! We are excited to have
        your team participate. Below are your registration details:</p>
      <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">
        <tr><th {cell}>Field</th><th {cell}>Details</th></tr>
        {table_rows}
      </table>
      <p>Please confirm your registration by clicking the link below:<br>
        <a href="{escape(link, quote=True)}" style="color: #4F46E5; font-weight: bold;">Confirm Email</a></p>
      <h3 style="color: #4F46E5;">Event Rules</h3>
      <ul>{rules}</ul>
      <p>For any queries, contact us at
        <a href="mailto:{escape(support_email, quote=True)}">{escape(support_email)}</a>.</p>
      <p style="text-align: center; color: #666; font-size: 12px;">Best Regards,<br>
        {escape(config.EMAIL_FROM_NAME)}</p>
    </div>
    """


def render_confirmation_text(registration: Registration, link: str) -> str:
    return (
        f"Dear {registration.team_leader_name},\n\n"
        f"Your team '{registration.team_name}' is registered for "
        f"{config.EVENTS.get(registration.event, registration.event)} "
        f"(registration no {registration.registration_id}).\n\n"
        f"Confirm your email: {link}\n"
    )


class EmailNotifier:
    """Sends registration confirmation emails over SMTP"""

    def __init__(
        self,
        hostname: str = config.SMTP_HOST,
        port: int = config.SMTP_PORT,
        username: str = config.SMTP_USER,
        password: str = config.SMTP_PASSWORD,
        from_email: str = config.EMAIL_FROM,
        from_name: str = config.EMAIL_FROM_NAME,
        base_url: str = config.PUBLIC_BASE_URL,
        support_email: str = config.SUPPORT_EMAIL,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        self.base_url = base_url
        self.support_email = support_email

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password and self.from_email)

    def build_message(self, registration: Registration) -> MIMEMultipart:
        link = confirmation_link(registration.registration_id, self.base_url)
        message = MIMEMultipart("alternative")
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = registration.email
        message["Subject"] = SUBJECT
        message.attach(MIMEText(render_confirmation_text(registration, link), "plain"))
        message.attach(MIMEText(render_confirmation(registration, link, self.support_email), "html"))
        return message

    async def send_confirmation(self, registration: Registration) -> None:
        if not self.is_configured:
            raise TransportError("Email transport is not configured")

        message = self.build_message(registration)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=True,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send confirmation email to %s: %s", registration.email, exc)
            raise TransportError("Failed to send confirmation email") from exc

        logger.info("Confirmation email sent to %s", registration.email)
