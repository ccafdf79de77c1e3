import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from quickwallet.common.dtos.webhook_ack import WebhookAck
from quickwallet.common.guards.webhook_secret import verify_paystack_signature
from quickwallet.modules.container import Container, get_container
from quickwallet.modules.conversations import messages
from quickwallet.modules.payments.dtos.payment import FundingSettlement, PaystackEvent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


async def _notify_funded(container: Container, settlement: FundingSettlement):
    if not settlement.credited or settlement.telegram_id is None:
        return
    try:
        await container.transport.send_message(
            settlement.telegram_id, messages.wallet_funded(settlement.amount, settlement.new_balance)
        )
    except Exception as e:
        logger.warning(f"Could not notify telegram_id={settlement.telegram_id} about funding: {str(e)}")


@router.post(
    "/paystack/webhook",
    response_model=WebhookAck,
    summary="Receive Paystack events",
    description="Signed with HMAC-SHA512 in x-paystack-signature. Only charge.success events credit wallets.",
    responses={
        200: {"description": "Event processed"},
        401: {"description": "Invalid Paystack signature"},
        422: {"description": "Malformed event"},
    },
)
async def paystack_webhook(
    body: bytes = Depends(verify_paystack_signature),
    container: Container = Depends(get_container),
):
    try:
        event = PaystackEvent.model_validate_json(body)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Malformed Paystack event") from e

    if event.event != "charge.success":
        return WebhookAck(status="ignored")

    settlement = await container.funding.settle(event.data.reference)
    await _notify_funded(container, settlement)
    return WebhookAck(detail={"reference": settlement.reference, "status": settlement.status})


@router.get(
    "/callback",
    response_model=FundingSettlement,
    summary="Paystack redirect target",
    description="Verifies the payment for the given reference and credits the wallet if that has not happened yet.",
)
async def payment_callback(
    reference: str = Query(..., min_length=1, description="Paystack transaction reference"),
    container: Container = Depends(get_container),
):
    settlement = await container.funding.settle(reference)
    if settlement.status == "not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown payment reference")
    await _notify_funded(container, settlement)
    return settlement
