from decimal import Decimal

import pytest

from quickwallet.common.enums.transaction_status import TransactionStatus
from quickwallet.modules.conversations.dtos.conversation import PurchaseRequest
from quickwallet.modules.fulfillment.dtos.provider import PaymentVerification
from quickwallet.modules.payments.services.funding_service import FundingService


@pytest.fixture
def funding(session_factory, fulfillment):
    return FundingService(session_factory, fulfillment)


@pytest.fixture
async def pending_funding(make_user, orchestrator):
    user = await make_user(balance="100")
    result = await orchestrator.fund(user, Decimal("2000"))
    return user, result.reference


async def test_verified_payment_credits_wallet(funding, pending_funding, ledger, transactions):
    user, reference = pending_funding

    settlement = await funding.settle(reference)

    assert settlement.credited
    assert settlement.status == "completed"
    assert settlement.amount == Decimal("2000.00")
    assert settlement.new_balance == Decimal("2100.00")
    assert settlement.telegram_id == user.telegram_id
    assert await ledger.get_balance(user.id) == Decimal("2100.00")
    assert (await transactions.get_by_reference(reference)).status is TransactionStatus.COMPLETED


async def test_repeated_settlement_credits_once(funding, pending_funding, ledger, paystack):
    user, reference = pending_funding

    first = await funding.settle(reference)
    second = await funding.settle(reference)

    assert first.credited
    assert not second.credited
    assert second.status == "already_settled"
    assert paystack.verify_calls == 1
    assert await ledger.get_balance(user.id) == Decimal("2100.00")


async def test_unknown_reference(funding):
    settlement = await funding.settle("FUND_0_0")

    assert settlement.status == "not_found"
    assert not settlement.credited


async def test_purchase_reference_is_not_a_funding(funding, make_user, orchestrator, transactions):
    user = await make_user(balance="1000")
    await orchestrator.execute(
        user.id,
        PurchaseRequest(kind="airtime", amount=Decimal("100"), network="MTN", phone_number="08123456789"),
    )

    settlement = await funding.settle("VTP_REF_1")

    assert settlement.status == "not_found"


async def test_abandoned_payment_fails_the_row(funding, pending_funding, paystack, ledger, transactions):
    user, reference = pending_funding
    paystack.verification = PaymentVerification(success=False, status="abandoned")

    settlement = await funding.settle(reference)

    assert settlement.status == "failed"
    assert (await transactions.get_by_reference(reference)).status is TransactionStatus.FAILED
    assert await ledger.get_balance(user.id) == Decimal("100.00")


async def test_unfinished_payment_stays_pending(funding, pending_funding, paystack, transactions):
    _, reference = pending_funding
    paystack.verification = PaymentVerification(success=False, status="ongoing", message="Payment verification failed")

    settlement = await funding.settle(reference)

    assert settlement.status == "pending"
    assert (await transactions.get_by_reference(reference)).status is TransactionStatus.PENDING


async def test_verification_without_amount_credits_requested_amount(funding, pending_funding, paystack, ledger):
    user, reference = pending_funding
    paystack.verification = PaymentVerification(success=True, amount=None, status="success")

    settlement = await funding.settle(reference)

    assert settlement.amount == Decimal("2000.00")
    assert await ledger.get_balance(user.id) == Decimal("2100.00")
