import html as markup
import requests
import structlog

from core.config import settings


log = structlog.get_logger()


class NotificationError(Exception):
    """Raised when the email provider could not accept a message."""
    pass


class EmailSender:
    """
    Sends transactional email through the SendGrid v3 API. Failures raise
    NotificationError so the caller decides whether the request fails.
    """

    def __init__(self, api_key=None, api_url=None, sender=None, timeout=None,
                 webinar_title=None, webinar_link=None, webinar_date=None):
        self.api_key = api_key if api_key is not None else settings.SENDGRID_API_KEY
        self.api_url = api_url or settings.SENDGRID_API_URL
        self.sender = sender or settings.EMAIL_FROM
        self.timeout = timeout or settings.EMAIL_TIMEOUT
        self.webinar_title = webinar_title or settings.WEBINAR_TITLE
        self.webinar_link = webinar_link or settings.WEBINAR_LINK
        self.webinar_date = webinar_date if webinar_date is not None else settings.WEBINAR_DATE

    def send(self, to: str, subject: str, text: str, html: str) -> None:
        if not self.api_key or not self.api_url:
            log.error("email.config_missing", api_url=self.api_url, api_key=bool(self.api_key))
            raise NotificationError("SENDGRID_API_KEY or SENDGRID_API_URL not configured")

        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.sender},
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": text},
                {"type": "text/html", "value": html},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            resp = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            log.error("email.exception", to=to, error=str(e))
            raise NotificationError(f"Email provider unreachable: {e}") from e

        if resp.status_code >= 300:
            log.error("email.failure", to=to, status_code=resp.status_code, response=resp.text[:500])
            raise NotificationError(f"Email provider rejected message ({resp.status_code})")
        log.info("email.sent", to=to, subject=subject)

    def _when(self) -> str:
        return f" on {self.webinar_date}" if self.webinar_date else ""

    def send_confirmation(self, name: str, email: str) -> None:
        subject = f"{self.webinar_title} Registration Successful"
        text = (
            f"Hi {name}, thanks for registering for {self.webinar_title}{self._when()}! "
            f"Webinar Link: {self.webinar_link}"
        )
        html = (
            f"<p>Hi <strong>{markup.escape(name)}</strong></p>"
            f"<p>Thanks for registering for {self.webinar_title}{self._when()}!</p>"
            f'<p><strong>Webinar Link:</strong> <a href="{self.webinar_link}">Join Here</a></p>'
        )
        self.send(email, subject, text, html)

    def send_reminder(self, name: str, email: str) -> None:
        subject = f"Reminder: {self.webinar_title} is coming up"
        text = (
            f"Hi {name}, this is a reminder that {self.webinar_title} starts soon{self._when()}. "
            f"Webinar Link: {self.webinar_link}"
        )
        html = (
            f"<p>Hi <strong>{markup.escape(name)}</strong></p>"
            f"<p>This is a reminder that {self.webinar_title} starts soon{self._when()}.</p>"
            f'<p><strong>Webinar Link:</strong> <a href="{self.webinar_link}">Join Here</a></p>'
        )
        self.send(email, subject, text, html)
