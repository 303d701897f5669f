from __future__ import annotations

import logging
from typing import Optional

import httpx

from admind.config import settings

logger = logging.getLogger("email.resend")


class EmailDeliveryError(RuntimeError):
    def __init__(self, *, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResendEmailClient:
    """Thin wrapper over the Resend transactional email REST API."""

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self._base_url = (base_url or settings.RESEND_API_BASE_URL).rstrip("/")
        self._sender = sender or settings.EMAIL_FROM
        self._timeout = timeout if timeout is not None else settings.EMAIL_REQUEST_TIMEOUT_SECONDS
        self._transport = transport

    async def send_email(self, *, to: list[str], subject: str, html: str) -> str | None:
        if not self._api_key:
            raise EmailDeliveryError(message="RESEND_API_KEY is not configured", status_code=503)
        if not to:
            raise EmailDeliveryError(message="Email has no recipients", status_code=400)

        payload = {"from": self._sender, "to": to, "subject": subject, "html": html}
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self._base_url}/emails", json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(message=f"Resend API request failed: {exc}") from exc

        if response.status_code >= 400:
            detail = response.text.strip() or "<empty response body>"
            raise EmailDeliveryError(
                message=f"Resend API request failed with status {response.status_code}: {detail[:300]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            data = {}
        email_id = data.get("id") if isinstance(data, dict) else None
        logger.info("Email sent", extra={"email_id": email_id, "recipients": len(to), "subject": subject})
        return email_id
