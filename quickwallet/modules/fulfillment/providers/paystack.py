import logging
from decimal import Decimal
from typing import Any

import httpx

from quickwallet.common.exceptions import ProviderFailure
from quickwallet.configuration.config import settings
from quickwallet.modules.fulfillment.dtos.provider import PaymentLink, PaymentVerification

logger = logging.getLogger(__name__)

KOBO_PER_NAIRA = 100


class PaystackClient:
    """Paystack hosted-payment client. Without a secret key it returns demo links and demo verifications."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.secret_key = settings.PAYSTACK_SECRET_KEY
        self.callback_url = settings.PAYSTACK_CALLBACK_URL
        self.client = client or httpx.AsyncClient(
            base_url=settings.PAYSTACK_BASE_URL,
            timeout=httpx.Timeout(timeout=settings.HTTP_TIMEOUT, connect=10.0),
        )

        if self.demo_mode:
            logger.warning("Paystack secret key not found. Payment features will be simulated.")

    @property
    def demo_mode(self) -> bool:
        return not self.secret_key

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.secret_key}"}

    async def generate_payment_link(
        self, email: str, amount: Decimal, reference: str, metadata: dict[str, Any] | None = None
    ) -> PaymentLink:
        if self.demo_mode:
            return PaymentLink(
                success=True,
                payment_url=f"https://demo-payment.com/pay?amount={amount}&ref={reference}",
                reference=reference,
            )

        payload = {
            "email": email,
            "amount": int(Decimal(amount) * KOBO_PER_NAIRA),
            "reference": reference,
            "metadata": metadata or {},
            "callback_url": self.callback_url,
        }
        try:
            response = await self.client.post("/transaction/initialize", json=payload, headers=self._headers())
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderFailure(f"Paystack initialize failed: {str(e)}") from e

        if body.get("status"):
            data = body.get("data") or {}
            return PaymentLink(
                success=True,
                payment_url=data.get("authorization_url"),
                reference=data.get("reference") or reference,
            )
        return PaymentLink(success=False, message=body.get("message") or "Failed to generate payment link")

    async def verify_payment(self, reference: str) -> PaymentVerification:
        if self.demo_mode:
            return PaymentVerification(success=True, amount=None, status="success", message="Demo mode")

        try:
            response = await self.client.get(f"/transaction/verify/{reference}", headers=self._headers())
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderFailure(f"Paystack verify failed: {str(e)}") from e

        data = body.get("data") or {}
        if body.get("status") and data.get("status") == "success":
            return PaymentVerification(
                success=True,
                amount=Decimal(str(data.get("amount", 0))) / KOBO_PER_NAIRA,
                status=data.get("status"),
            )
        return PaymentVerification(success=False, status=data.get("status"), message="Payment verification failed")

    async def close(self):
        await self.client.aclose()
