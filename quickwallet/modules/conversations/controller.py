import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, status

from quickwallet.common.dtos.webhook_ack import WebhookAck
from quickwallet.common.guards.webhook_secret import verify_telegram_secret
from quickwallet.modules.container import Container, get_container
from quickwallet.modules.conversations.dtos.conversation import InboundMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telegram", tags=["telegram"])


def inbound_from_update(update: dict[str, Any]) -> InboundMessage | None:
    """Extracts a text message from a Telegram Update; None for anything else (edits, stickers, callbacks)."""
    message = update.get("message")
    if not isinstance(message, dict) or not isinstance(message.get("text"), str):
        return None
    chat = message.get("chat") or {}
    sender = message.get("from") or {}
    if "id" not in chat or "id" not in sender:
        return None
    return InboundMessage(
        chat_id=chat["id"],
        user_id=sender["id"],
        text=message["text"],
        message_id=message.get("message_id"),
    )


@router.post(
    "/webhook",
    response_model=WebhookAck,
    status_code=status.HTTP_200_OK,
    summary="Receive Telegram updates",
    description="Telegram Bot API webhook. Text messages are handed to the dispatcher in the background.",
    responses={
        200: {"description": "Update accepted", "content": {"application/json": {"example": {"status": "ok"}}}},
        403: {"description": "Invalid webhook secret"},
    },
    dependencies=[Depends(verify_telegram_secret)],
)
async def telegram_webhook(
    background_tasks: BackgroundTasks,
    update: dict[str, Any] = Body(...),
    container: Container = Depends(get_container),
):
    inbound = inbound_from_update(update)
    if inbound is None:
        return WebhookAck(status="ignored")

    background_tasks.add_task(container.dispatcher.dispatch, inbound)
    return WebhookAck()
