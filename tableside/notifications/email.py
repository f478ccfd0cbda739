"""Email delivery through the Resend HTTP API"""

from typing import Optional

import httpx
import structlog

from tableside.config import settings

logger = structlog.get_logger()


class EmailNotConfigured(Exception):
    pass


class EmailDispatcher:
    """Sends transactional email; one POST per message"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.resend_api_key if api_key is None else api_key
        self.from_email = from_email or settings.resend_from_email
        self.api_url = api_url or settings.resend_api_url
        self.timeout = timeout or settings.email_timeout_seconds
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send(
        self,
        sender_name: str,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
    ) -> Optional[str]:
        """Send one message and return the provider's message id"""
        if not self.configured:
            raise EmailNotConfigured("RESEND_API_KEY is not set")

        payload = {
            "from": f"{sender_name} <{self.from_email}>",
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
            data = response.json()

        logger.debug("Email sent", message_id=data.get("id"))
        return data.get("id")
