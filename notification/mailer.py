"""
Outgoing e-mail.

The SMTP transport is best-effort: `send` never raises, it reports whether the
message left the process. Missing credentials are a normal condition in
development and simply yield False.
"""
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from html import escape
from typing import Optional

from core.config_loader import settings
from core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    text: str
    html: str


class SmtpMailer:
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.use_tls = use_tls
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)

    def send(self, message: MailMessage) -> bool:
        if not self.configured:
            logger.warning("SMTP credentials missing, e-mail not sent", to=message.to, subject=message.subject)
            return False

        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.text)
        email.add_alternative(message.html, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.username, self.password)
                server.send_message(email)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("E-mail delivery failed", to=message.to, subject=message.subject, error=str(exc))
            return False

        logger.info("E-mail sent", to=message.to, subject=message.subject)
        return True


_default_mailer: Optional[SmtpMailer] = None


def get_mailer() -> SmtpMailer:
    global _default_mailer
    if _default_mailer is None:
        _default_mailer = SmtpMailer(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            sender=settings.SMTP_FROM or None,
            use_tls=settings.SMTP_USE_TLS,
        )
    return _default_mailer


def deliver(mailer, message: MailMessage) -> bool:
    """Send through any mailer, turning every failure into False."""
    try:
        return bool(mailer.send(message))
    except Exception:
        logger.exception("Mailer raised while sending", to=message.to, subject=message.subject)
        return False


# ---------- Templates ----------

def invitation_email(
    to: str,
    organization_name: str,
    invite_url: str,
    recipient_name: Optional[str] = None,
    inviter_name: Optional[str] = None,
) -> MailMessage:
    greeting = f"Hi {recipient_name}," if recipient_name else "Hi,"
    invited_by = f"{inviter_name} has invited you" if inviter_name else "You have been invited"
    text = (
        f"{greeting}\n\n"
        f"{invited_by} to join {organization_name} on HR.\n"
        f"Set your password and finish your profile here:\n{invite_url}\n\n"
        "This link can be used once and expires soon."
    )
    html = (
        f"<p>{escape(greeting)}</p>"
        f"<p>{escape(invited_by)} to join <strong>{escape(organization_name)}</strong> on HR.</p>"
        f'<p><a href="{escape(invite_url)}">Accept your invitation</a></p>'
        "<p>This link can be used once and expires soon.</p>"
    )
    return MailMessage(to=to, subject=f"You're invited to {organization_name} on HR", text=text, html=html)


def password_reset_email(to: str, reset_url: str) -> MailMessage:
    text = (
        "We received a request to reset your password.\n"
        f"Choose a new one here:\n{reset_url}\n\n"
        "If you did not ask for this, you can ignore this e-mail."
    )
    html = (
        "<p>We received a request to reset your password.</p>"
        f'<p><a href="{escape(reset_url)}">Reset your password</a></p>'
        "<p>If you did not ask for this, you can ignore this e-mail.</p>"
    )
    return MailMessage(to=to, subject="Reset your HR password", text=text, html=html)
