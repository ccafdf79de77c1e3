import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import httpx

from quickwallet.common.enums.network import Network
from quickwallet.common.exceptions import ProviderFailure
from quickwallet.configuration.config import settings
from quickwallet.modules.fulfillment import catalog
from quickwallet.modules.fulfillment.dtos.provider import DataPlan, DataPlanListing, ProviderOutcome

logger = logging.getLogger(__name__)

# VTPass request ids must start with the current Africa/Lagos time (UTC+1, no DST)
LAGOS_TZ = timezone(timedelta(hours=1))
SUCCESS_CODE = "000"


def build_request_id(now: datetime | None = None) -> str:
    now = (now or datetime.now(LAGOS_TZ)).astimezone(LAGOS_TZ)
    return f"{now:%Y%m%d%H%M}{uuid.uuid4().hex[:12]}"


class VTPassClient:
    """
    Thin async client for the VTPass bill payment API.

    Runs in demo mode (purchases succeed with DEMO_ references) when the
    api-key/secret-key pair is not configured.
    """

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.api_key = settings.VTPASS_API_KEY
        self.secret_key = settings.VTPASS_SECRET_KEY
        self.public_key = settings.VTPASS_PUBLIC_KEY
        self.client = client or httpx.AsyncClient(
            base_url=settings.VTPASS_BASE_URL,
            timeout=httpx.Timeout(timeout=settings.HTTP_TIMEOUT, connect=10.0),
        )
        self._plan_cache: dict[Network, DataPlanListing] = {}

        if self.demo_mode:
            logger.warning("VTPass credentials not found. Service purchases will be simulated.")

    @property
    def demo_mode(self) -> bool:
        return not (self.api_key and self.secret_key)

    def _post_headers(self) -> dict[str, str]:
        return {"api-key": self.api_key, "secret-key": self.secret_key}

    def _get_headers(self) -> dict[str, str]:
        return {"api-key": self.api_key, "public-key": self.public_key}

    async def _pay(self, payload: dict[str, Any], success_message: str) -> ProviderOutcome:
        try:
            response = await self.client.post("/pay", json=payload, headers=self._post_headers())
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderFailure(f"VTPass request failed: {str(e)}") from e

        if body.get("code") == SUCCESS_CODE:
            return ProviderOutcome(
                success=True,
                reference=body.get("requestId") or payload["request_id"],
                message=success_message,
            )

        logger.warning(f"VTPass rejected request {payload['request_id']}: code={body.get('code')}")
        return ProviderOutcome(success=False, message=body.get("response_description") or "Purchase failed")

    async def purchase_airtime(self, network: Network | str, amount: Decimal, phone_number: str) -> ProviderOutcome:
        if self.demo_mode:
            return ProviderOutcome(
                success=True,
                reference=f"DEMO_{int(time.time() * 1000)}",
                message="Airtime purchase successful (Demo mode)",
            )

        payload = {
            "request_id": build_request_id(),
            "serviceID": catalog.airtime_service_id(network),
            "amount": str(amount),
            "phone": phone_number,
        }
        return await self._pay(payload, "Airtime purchase successful")

    async def purchase_data(
        self, network: Network | str, data_size: str, phone_number: str, variation_code: str | None = None
    ) -> ProviderOutcome:
        """Buys the plan with `variation_code`; without one the code is looked up in the static table."""
        if self.demo_mode:
            return ProviderOutcome(
                success=True,
                reference=f"DEMO_{int(time.time() * 1000)}",
                message="Data purchase successful (Demo mode)",
            )

        payload = {
            "request_id": build_request_id(),
            "serviceID": catalog.data_service_id(network),
            "billersCode": phone_number,
            "variation_code": variation_code or catalog.variation_code(network, data_size),
            "phone": phone_number,
        }
        return await self._pay(payload, "Data purchase successful")

    async def get_data_plans(self, network: Network | str | None) -> DataPlanListing:
        """Live service variations when credentials allow, cached per network; the static table otherwise."""
        listing = catalog.static_plans(network)
        if listing.is_fallback or self.demo_mode or not self.public_key:
            return listing

        cached = self._plan_cache.get(listing.network)
        if cached is not None:
            return cached

        try:
            response = await self.client.get(
                "/service-variations",
                params={"serviceID": catalog.data_service_id(listing.network)},
                headers=self._get_headers(),
            )
            response.raise_for_status()
            variations = response.json().get("content", {}).get("variations") or []
            plans = [
                DataPlan(
                    name=variation["name"],
                    code=variation["variation_code"],
                    amount=Decimal(str(variation["variation_amount"])),
                )
                for variation in variations
            ]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Could not fetch {listing.network.value} data plans from VTPass: {str(e)}")
            return listing

        if not plans:
            return listing

        live = DataPlanListing(network=listing.network, plans=plans)
        self._plan_cache[listing.network] = live
        return live

    async def close(self):
        await self.client.aclose()
