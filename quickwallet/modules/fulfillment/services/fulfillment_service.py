"""
Fulfillment gateway: the single seam between the wallet core and the remote providers.

Every provider error is normalized into a failed outcome; nothing raised by a
provider client escapes this module.
"""
import logging
from decimal import Decimal
from typing import Any

from quickwallet.common.enums.network import Network
from quickwallet.modules.fulfillment import catalog
from quickwallet.modules.fulfillment.dtos.provider import (
    DataPlanListing,
    PaymentLink,
    PaymentVerification,
    ProviderOutcome,
)
from quickwallet.modules.fulfillment.providers.paystack import PaystackClient
from quickwallet.modules.fulfillment.providers.vtpass import VTPassClient

logger = logging.getLogger(__name__)

UNAVAILABLE = "Service temporarily unavailable"


class FulfillmentService:
    def __init__(self, vtpass: VTPassClient | None = None, paystack: PaystackClient | None = None):
        self.vtpass = vtpass or VTPassClient()
        self.paystack = paystack or PaystackClient()

    async def purchase_airtime(self, network: Network | str, amount: Decimal, phone_number: str) -> ProviderOutcome:
        try:
            outcome = await self.vtpass.purchase_airtime(network, amount, phone_number)
        except Exception as e:
            logger.error(f"Airtime purchase failed for {phone_number}: {str(e)}", exc_info=True)
            return ProviderOutcome(success=False, message=UNAVAILABLE)
        logger.info(f"Airtime purchase for {phone_number}: success={outcome.success}, ref={outcome.reference}")
        return outcome

    async def purchase_data(
        self, network: Network | str, data_size: str, phone_number: str, variation_code: str | None = None
    ) -> ProviderOutcome:
        try:
            outcome = await self.vtpass.purchase_data(network, data_size, phone_number, variation_code)
        except Exception as e:
            logger.error(f"Data purchase failed for {phone_number}: {str(e)}", exc_info=True)
            return ProviderOutcome(success=False, message=UNAVAILABLE)
        logger.info(f"Data purchase for {phone_number}: success={outcome.success}, ref={outcome.reference}")
        return outcome

    async def get_data_plans(self, network: Network | str | None) -> DataPlanListing:
        try:
            return await self.vtpass.get_data_plans(network)
        except Exception as e:
            logger.warning(f"Data plan lookup failed, using static plans: {str(e)}")
            return catalog.static_plans(network)

    async def generate_payment_link(
        self, email: str, amount: Decimal, reference: str, metadata: dict[str, Any] | None = None
    ) -> PaymentLink:
        try:
            return await self.paystack.generate_payment_link(email, amount, reference, metadata)
        except Exception as e:
            logger.error(f"Payment link generation failed for {reference}: {str(e)}", exc_info=True)
            return PaymentLink(success=False, message="Payment service temporarily unavailable")

    async def verify_payment(self, reference: str) -> PaymentVerification:
        try:
            return await self.paystack.verify_payment(reference)
        except Exception as e:
            logger.error(f"Payment verification failed for {reference}: {str(e)}", exc_info=True)
            return PaymentVerification(success=False, message="Verification service temporarily unavailable")

    async def close(self):
        await self.vtpass.close()
        await self.paystack.close()
