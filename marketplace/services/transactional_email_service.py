"""
Outbound marketplace mail.

New-order alerts for wholesalers, settlement payouts and inquiry answers are
rendered from the Korean Jinja2 templates in ``marketplace/templates/email``
and handed to one transactional provider:

- Resend (default)
- Mailgun, over its HTTP API with requests

Every message is tagged with its marketplace event type so provider dashboards
can split deliveries per event. Sending never raises; callers get a result
dict and record it on the email log row.
"""

import os
import re
import logging
from typing import Optional, Dict, Any, List
from enum import Enum
from pathlib import Path
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

logger = logging.getLogger("marketplace.email")

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"
MAILGUN_API_BASE = "https://api.mailgun.net/v3"


class EmailProvider(Enum):
    RESEND = "resend"
    MAILGUN = "mailgun"


class TransactionalEmailConfig:
    """Provider credentials and sender identity read from the environment."""

    def __init__(self):
        self.provider = EmailProvider(os.getenv('EMAIL_PROVIDER', 'resend').lower())

        self.from_email = os.getenv('FROM_EMAIL', 'noreply@farmtobiz.com')
        self.from_name = os.getenv('FROM_NAME', '팜투비즈')
        self.reply_to_email = os.getenv('REPLY_TO_EMAIL', '')
        self.subject_prefix = os.getenv('EMAIL_SUBJECT_PREFIX', '[팜투비즈]')

        self.resend_api_key = os.getenv('RESEND_API_KEY', '')
        self.mailgun_api_key = os.getenv('MAILGUN_API_KEY', '')
        self.mailgun_domain = os.getenv('MAILGUN_DOMAIN', '')

        self.template_dir = os.getenv('EMAIL_TEMPLATE_DIR', str(DEFAULT_TEMPLATE_DIR))

    def validate(self) -> List[str]:
        """Return the missing settings for the selected provider."""
        missing = []
        if not self.from_email:
            missing.append("FROM_EMAIL is required")
        if self.provider == EmailProvider.RESEND and not self.resend_api_key:
            missing.append("RESEND_API_KEY is required for Resend provider")
        if self.provider == EmailProvider.MAILGUN:
            if not self.mailgun_api_key:
                missing.append("MAILGUN_API_KEY is required for Mailgun provider")
            if not self.mailgun_domain:
                missing.append("MAILGUN_DOMAIN is required for Mailgun provider")
        return missing

    def is_configured(self) -> bool:
        return not self.validate()

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_email}>"

    def decorate_subject(self, subject: str) -> str:
        if not self.subject_prefix or subject.startswith(self.subject_prefix):
            return subject
        return f"{self.subject_prefix} {subject}"


class _ProviderClient:
    name = ""

    def __init__(self, config: TransactionalEmailConfig):
        self.config = config

    def _failure(self, error: str) -> Dict[str, Any]:
        return {'success': False, 'provider': self.name, 'error': error}

    def _success(self, message_id: str, response: Any) -> Dict[str, Any]:
        return {
            'success': True,
            'provider': self.name,
            'message_id': message_id,
            'provider_response': response,
        }


class ResendClient(_ProviderClient):
    name = "resend"

    def __init__(self, config: TransactionalEmailConfig):
        super().__init__(config)
        import resend

        resend.api_key = config.resend_api_key
        self.resend = resend

    async def deliver(self, message: Dict[str, Any]) -> Dict[str, Any]:
        params = {
            "from": self.config.sender,
            "to": [message["to"]],
            "subject": message["subject"],
            "html": message["html"],
        }
        if message.get("text"):
            params["text"] = message["text"]
        if self.config.reply_to_email:
            params["reply_to"] = self.config.reply_to_email
        if message.get("tag"):
            params["tags"] = [{"name": "event_type", "value": message["tag"]}]
        try:
            sent = self.resend.Emails.send(params)
        except Exception as e:
            return self._failure(str(e))
        return self._success(sent['id'], sent)


class MailgunClient(_ProviderClient):
    name = "mailgun"

    def __init__(self, config: TransactionalEmailConfig):
        super().__init__(config)
        import requests

        self.requests = requests
        self.messages_url = f"{MAILGUN_API_BASE}/{config.mailgun_domain}/messages"

    async def deliver(self, message: Dict[str, Any]) -> Dict[str, Any]:
        form = {
            "from": self.config.sender,
            "to": message["to"],
            "subject": message["subject"],
            "html": message["html"],
        }
        if message.get("text"):
            form["text"] = message["text"]
        if self.config.reply_to_email:
            form["h:Reply-To"] = self.config.reply_to_email
        if message.get("tag"):
            form["o:tag"] = message["tag"]
        try:
            response = self.requests.post(
                self.messages_url,
                auth=("api", self.config.mailgun_api_key),
                data=form,
                timeout=10,
            )
        except self.requests.RequestException as e:
            return self._failure(str(e))
        if response.status_code != 200:
            return self._failure(f"HTTP {response.status_code}: {response.text}")
        body = response.json()
        return self._success(body.get('id', ''), body)


_PROVIDER_CLIENTS = {
    EmailProvider.RESEND: ResendClient,
    EmailProvider.MAILGUN: MailgunClient,
}


class TransactionalEmailService:
    """Renders marketplace templates and sends them through the configured provider."""

    def __init__(self, config: Optional[TransactionalEmailConfig] = None):
        self.config = config or TransactionalEmailConfig()
        self.client = self._build_client()
        self.template_env = self._build_template_env()

    def _build_client(self) -> Optional[_ProviderClient]:
        missing = self.config.validate()
        if missing:
            logger.warning("Email delivery disabled (provider=%s): %s", self.config.provider.value, "; ".join(missing))
            return None
        try:
            client = _PROVIDER_CLIENTS[self.config.provider](self.config)
        except ImportError as e:
            logger.error("Email provider %s unavailable: %s", self.config.provider.value, e)
            return None
        logger.info("Email delivery via %s", client.name)
        return client

    def _build_template_env(self) -> Environment:
        template_path = Path(self.config.template_dir)
        if not template_path.exists():
            logger.warning("Email template directory not found: %s", template_path)
        return Environment(
            loader=FileSystemLoader(str(template_path)),
            autoescape=select_autoescape(["html"]),
        )

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Deliver one message.

        Returns:
            Dict with 'success' and either 'message_id' or 'error'
        """
        if self.client is None:
            return {'success': False, 'error': 'Email service not configured or initialization failed'}

        result = await self.client.deliver({
            "to": to_email,
            "subject": self.config.decorate_subject(subject),
            "html": html_content,
            "text": text_content,
            "tag": tag,
        })
        if result['success']:
            logger.info("Email [%s] sent to %s via %s", tag or "-", to_email, result['provider'])
        else:
            logger.error("Email [%s] to %s failed: %s", tag or "-", to_email, result['error'])
        return result

    def render_template(self, template_name: str, context: Dict[str, Any]) -> tuple[str, str]:
        """Render ``<name>.html`` and its ``.txt`` twin, deriving text from HTML when absent."""
        html_content = self.template_env.get_template(f"{template_name}.html").render(**context)
        try:
            text_content = self.template_env.get_template(f"{template_name}.txt").render(**context)
        except TemplateNotFound:
            text_content = strip_html(html_content)
        return html_content, text_content


_ENTITIES = {'&amp;': '&', '&lt;': '<', '&gt;': '>', '&quot;': '"', '&#39;': "'", '&nbsp;': ' '}


def strip_html(html_content: str) -> str:
    text = re.sub(r'<(br|/p|/div|/tr|/h\d)\s*/?>', '\n', html_content, flags=re.IGNORECASE)
    text = re.sub(r'<[^>]+>', '', text)
    for entity, char in _ENTITIES.items():
        text = text.replace(entity, char)
    lines = (re.sub(r'[ \t]+', ' ', line).strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


_email_service = None


def get_transactional_email_service() -> TransactionalEmailService:
    global _email_service
    if _email_service is None:
        _email_service = TransactionalEmailService()
    return _email_service


def reset_transactional_email_service_for_tests() -> None:
    global _email_service
    _email_service = None
