from decimal import Decimal

from quickwallet.common.enums.intent import Intent
from quickwallet.common.enums.network import Network
from quickwallet.modules.conversations.agent.intent_parser import IntentParser, parse_intent_fallback
from quickwallet.modules.conversations.dtos.intent import ResolvedIntent


class FakeReply:
    def __init__(self, content):
        self.content = content


class FakeLLM:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = 0

    async def ainvoke(self, messages):
        self.calls += 1
        if self.error:
            raise self.error
        return FakeReply(self.content)


def test_fallback_airtime_extracts_all_parameters():
    resolved = parse_intent_fallback("Buy ₦500 MTN airtime for 08123456789")

    assert resolved.intent is Intent.AIRTIME_PURCHASE
    assert resolved.amount == Decimal("500")
    assert resolved.network is Network.MTN
    assert resolved.phone_number == "08123456789"


def test_fallback_data_with_known_network():
    resolved = parse_intent_fallback("Get me 2GB Airtel data")

    assert resolved.intent is Intent.DATA_PURCHASE
    assert resolved.network is Network.AIRTEL
    assert resolved.data_size == "2GB"
    assert resolved.amount is None


def test_fallback_data_keeps_unknown_network_text():
    resolved = parse_intent_fallback("Buy 2GB Vodafone data")

    assert resolved.intent is Intent.DATA_PURCHASE
    assert resolved.network is None
    assert resolved.mentions_unknown_network
    assert resolved.raw_network == "Vodafone"


def test_fallback_data_without_network():
    resolved = parse_intent_fallback("get me 2GB data")

    assert resolved.network is None
    assert not resolved.mentions_unknown_network


def test_fallback_simple_intents():
    assert parse_intent_fallback("check my balance").intent is Intent.BALANCE_CHECK
    assert parse_intent_fallback("show my transactions").intent is Intent.TRANSACTIONS
    assert parse_intent_fallback("monthly report please").intent is Intent.MONTHLY_REPORT
    assert parse_intent_fallback("I want to set pin").intent is Intent.SET_PIN
    assert parse_intent_fallback("change pin").intent is Intent.CHANGE_PIN
    assert parse_intent_fallback("tell me a joke").intent is Intent.UNKNOWN


def test_fallback_fund_amount():
    resolved = parse_intent_fallback("Fund my wallet with ₦2,000")

    assert resolved.intent is Intent.WALLET_FUND
    assert resolved.amount == Decimal("2000")
    assert parse_intent_fallback("fund wallet").amount is None


def test_etisalat_maps_to_9mobile():
    resolved = parse_intent_fallback("recharge 200 etisalat airtime 09012345678")

    assert resolved.network is Network.NINE_MOBILE


def test_resolved_intent_accepts_enum_members_and_tags():
    assert ResolvedIntent(intent=Intent.DATA_PURCHASE).intent is Intent.DATA_PURCHASE
    assert ResolvedIntent(intent=Intent.BALANCE_CHECK).intent is Intent.BALANCE_CHECK
    assert ResolvedIntent(intent=" Wallet_Fund ").intent is Intent.WALLET_FUND
    assert ResolvedIntent(intent="transfer").intent is Intent.UNKNOWN


async def test_parser_without_key_uses_fallback():
    parser = IntentParser(openai_api_key="")

    resolved = await parser.parse_intent("check balance")

    assert parser.llm is None
    assert resolved.intent is Intent.BALANCE_CHECK


async def test_parser_reads_model_json():
    llm = FakeLLM(
        'Sure: {"intent":"data_purchase","amount":null,"network":"Glo","phoneNumber":"08051234567","dataSize":"1 gb"}'
    )
    parser = IntentParser(llm=llm)

    resolved = await parser.parse_intent("glo 1gb for my brother 08051234567")

    assert llm.calls == 1
    assert resolved.intent is Intent.DATA_PURCHASE
    assert resolved.network is Network.GLO
    assert resolved.phone_number == "08051234567"
    assert resolved.data_size == "1GB"


async def test_parser_unknown_intent_tag_becomes_unknown():
    parser = IntentParser(llm=FakeLLM('{"intent":"order_pizza"}'))

    resolved = await parser.parse_intent("pizza")

    assert resolved.intent is Intent.UNKNOWN


async def test_parser_falls_back_when_model_fails():
    parser = IntentParser(llm=FakeLLM(error=RuntimeError("rate limited")))

    resolved = await parser.parse_intent("Buy ₦500 MTN airtime for 08123456789")

    assert resolved.intent is Intent.AIRTIME_PURCHASE
    assert resolved.amount == Decimal("500")


async def test_parser_falls_back_on_non_json_reply():
    parser = IntentParser(llm=FakeLLM("I think you want your balance"))

    resolved = await parser.parse_intent("balance?")

    assert resolved.intent is Intent.BALANCE_CHECK
