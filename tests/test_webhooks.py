import json
from decimal import Decimal

import httpx
import pytest

from quickwallet.common.guards.webhook_secret import paystack_signature
from quickwallet.common.redis_service import RedisService
from quickwallet.configuration.config import settings
from quickwallet.main import app
from quickwallet.modules.container import Container
from quickwallet.modules.conversations import messages
from quickwallet.modules.conversations.agent.intent_parser import IntentParser
from quickwallet.modules.conversations.controller import inbound_from_update
from quickwallet.modules.transport.telegram_transport import TelegramTransport

PAYSTACK_SECRET = "sk_test_webhook"


@pytest.fixture
def container(session_factory, transport, fulfillment):
    container = Container(
        session_factory=session_factory,
        transport=transport,
        fulfillment=fulfillment,
        intent_parser=IntentParser(openai_api_key=""),
        redis_service=RedisService(url=""),
    )
    app.state.container = container
    yield container
    del app.state.container


@pytest.fixture
async def client(container):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client


def telegram_update(text: str, user_id: int = 555001) -> dict:
    return {
        "update_id": 1,
        "message": {
            "message_id": 42,
            "from": {"id": user_id, "is_bot": False, "first_name": "Ada"},
            "chat": {"id": user_id, "type": "private"},
            "text": text,
        },
    }


def signed(body: dict, secret: str = PAYSTACK_SECRET) -> tuple[bytes, dict]:
    raw = json.dumps(body).encode("utf-8")
    return raw, {"x-paystack-signature": paystack_signature(raw, secret), "Content-Type": "application/json"}


async def test_health(client):
    assert (await client.get("/health")).json() == {"status": "healthy"}
    assert (await client.get("/")).json()["version"] == settings.APP_VERSION


def test_inbound_from_update():
    inbound = inbound_from_update(telegram_update("hello"))

    assert inbound.chat_id == 555001
    assert inbound.user_id == 555001
    assert inbound.message_id == 42
    assert inbound_from_update({"update_id": 2, "edited_message": {"text": "x"}}) is None
    assert inbound_from_update({"update_id": 3, "message": {"chat": {"id": 1}, "from": {"id": 1}}}) is None


class TestTelegramWebhook:
    async def test_text_message_is_answered(self, client, transport, monkeypatch):
        monkeypatch.setattr(settings, "TELEGRAM_WEBHOOK_SECRET", "")

        response = await client.post("/api/v1/telegram/webhook", json=telegram_update("hello"))

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "detail": None}
        assert transport.sent == [(555001, messages.REGISTER_FIRST)]

    async def test_non_text_update_is_ignored(self, client, transport, monkeypatch):
        monkeypatch.setattr(settings, "TELEGRAM_WEBHOOK_SECRET", "")

        response = await client.post("/api/v1/telegram/webhook", json={"update_id": 5, "callback_query": {}})

        assert response.json()["status"] == "ignored"
        assert transport.sent == []

    async def test_secret_is_enforced(self, client, transport, monkeypatch):
        monkeypatch.setattr(settings, "TELEGRAM_WEBHOOK_SECRET", "s3cret")

        missing = await client.post("/api/v1/telegram/webhook", json=telegram_update("hello"))
        wrong = await client.post(
            "/api/v1/telegram/webhook",
            json=telegram_update("hello"),
            headers={"X-Telegram-Bot-Api-Secret-Token": "guess"},
        )
        right = await client.post(
            "/api/v1/telegram/webhook",
            json=telegram_update("hello"),
            headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
        )

        assert missing.status_code == 403
        assert wrong.status_code == 403
        assert right.status_code == 200
        assert len(transport.sent) == 1


class TestPaystackWebhook:
    @pytest.fixture(autouse=True)
    def paystack_secret(self, monkeypatch):
        monkeypatch.setattr(settings, "PAYSTACK_SECRET_KEY", PAYSTACK_SECRET)

    @pytest.fixture
    async def reference(self, make_user, container):
        user = await make_user(balance="0")
        result = await container.orchestrator.fund(user, Decimal("2000"))
        return result.reference

    async def test_charge_success_credits_and_notifies(self, client, container, transport, reference):
        body, headers = signed({"event": "charge.success", "data": {"reference": reference, "amount": 200000}})

        response = await client.post("/api/v1/payments/paystack/webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert response.json()["detail"] == {"reference": reference, "status": "completed"}
        user = await container.users.get_by_telegram_id(555001)
        assert await container.ledger.get_balance(user.id) == Decimal("2000.00")
        assert transport.sent == [(555001, messages.wallet_funded(Decimal("2000"), Decimal("2000")))]

    async def test_replayed_event_credits_once(self, client, container, transport, reference):
        body, headers = signed({"event": "charge.success", "data": {"reference": reference}})

        await client.post("/api/v1/payments/paystack/webhook", content=body, headers=headers)
        replay = await client.post("/api/v1/payments/paystack/webhook", content=body, headers=headers)

        assert replay.json()["detail"]["status"] == "already_settled"
        user = await container.users.get_by_telegram_id(555001)
        assert await container.ledger.get_balance(user.id) == Decimal("2000.00")
        assert len(transport.sent) == 1

    async def test_bad_signature_is_rejected(self, client, reference):
        body, headers = signed({"event": "charge.success", "data": {"reference": reference}}, secret="not-it")

        response = await client.post("/api/v1/payments/paystack/webhook", content=body, headers=headers)

        assert response.status_code == 401

    async def test_unconfigured_paystack_refuses_webhooks(self, client, monkeypatch):
        monkeypatch.setattr(settings, "PAYSTACK_SECRET_KEY", "")

        response = await client.post("/api/v1/payments/paystack/webhook", content=b"{}")

        assert response.status_code == 503

    async def test_other_events_are_ignored(self, client, reference, paystack):
        body, headers = signed({"event": "transfer.success", "data": {"reference": reference}})

        response = await client.post("/api/v1/payments/paystack/webhook", content=body, headers=headers)

        assert response.json()["status"] == "ignored"
        assert paystack.verify_calls == 0

    async def test_malformed_event(self, client):
        body, headers = signed({"event": "charge.success"})

        response = await client.post("/api/v1/payments/paystack/webhook", content=body, headers=headers)

        assert response.status_code == 422


class TestPaymentCallback:
    async def test_callback_settles(self, client, container, make_user):
        user = await make_user()
        result = await container.orchestrator.fund(user, Decimal("2000"))

        response = await client.get("/api/v1/payments/callback", params={"reference": result.reference})

        assert response.status_code == 200
        assert response.json()["credited"] is True
        assert await container.ledger.get_balance(user.id) == Decimal("2000.00")

    async def test_unknown_reference_is_404(self, client):
        response = await client.get("/api/v1/payments/callback", params={"reference": "FUND_1_1"})

        assert response.status_code == 404


async def test_telegram_transport_calls_bot_api():
    seen = []

    def handler(request: httpx.Request):
        seen.append((request.url.path, json.loads(request.content)))
        if request.url.path.endswith("/deleteMessage"):
            return httpx.Response(400, json={"ok": False, "description": "message can't be deleted"})
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 7}})

    transport = TelegramTransport(
        bot_token="123:abc",
        client=httpx.AsyncClient(base_url="https://api.telegram.test/bot123:abc", transport=httpx.MockTransport(handler)),
    )

    assert (await transport.send_message(9, "hi"))["ok"] is True
    assert await transport.delete_message(9, 7) is False
    assert seen == [
        ("/bot123:abc/sendMessage", {"chat_id": 9, "text": "hi"}),
        ("/bot123:abc/deleteMessage", {"chat_id": 9, "message_id": 7}),
    ]
