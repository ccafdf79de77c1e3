import json
import logging
import re

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from quickwallet.common.enums.intent import Intent
from quickwallet.configuration.config import settings
from quickwallet.modules.conversations.dtos.intent import ResolvedIntent

logger = logging.getLogger(__name__)

INTENT_SYSTEM_PROMPT = """You extract intents for a Nigerian airtime/data wallet bot.
Return ONLY a JSON object with this exact structure:
{
  "intent": "balance_check|wallet_fund|airtime_purchase|data_purchase|transactions|monthly_report|set_pin|change_pin|unknown",
  "amount": number or null,
  "network": "MTN|Airtel|Glo|9mobile" or the network as written, or null,
  "phone_number": "phone number" or null,
  "data_size": "data amount like 1GB, 500MB" or null
}

Examples:
"Buy ₦500 MTN airtime for 08123456789" -> {"intent":"airtime_purchase","amount":500,"network":"MTN","phone_number":"08123456789","data_size":null}
"Get me 2GB Airtel data" -> {"intent":"data_purchase","amount":null,"network":"Airtel","phone_number":null,"data_size":"2GB"}
"Check balance" -> {"intent":"balance_check","amount":null,"network":null,"phone_number":null,"data_size":null}
"Fund wallet with ₦2000" -> {"intent":"wallet_fund","amount":2000,"network":null,"phone_number":null,"data_size":null}
"Monthly report" -> {"intent":"monthly_report","amount":null,"network":null,"phone_number":null,"data_size":null}"""

JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
AMOUNT = re.compile(r"₦?\s?(\d[\d,]*(?:\.\d{1,2})?)")
PHONE = re.compile(r"(?<!\d)(\d{11})(?!\d)")
NETWORK = re.compile(r"\b(mtn|airtel|glo|9mobile|etisalat)\b", re.IGNORECASE)
DATA_SIZE = re.compile(r"(\d+(?:\.\d+)?)\s*(gb|mb)\b", re.IGNORECASE)
# "<word> data" where <word> names a network the bot may not support
NETWORK_BEFORE_DATA = re.compile(r"\b([a-z][a-z0-9]*)\s+data\b", re.IGNORECASE)
NOT_A_NETWORK = {"me", "some", "buy", "get", "the", "a", "my", "of", "more", "purchase", "send", "want", "need"}


def _amount_outside_phone(message: str) -> str | None:
    without_phone = PHONE.sub(" ", message)
    without_sizes = DATA_SIZE.sub(" ", without_phone)
    match = AMOUNT.search(without_sizes)
    return match.group(1) if match else None


def parse_intent_fallback(message: str) -> ResolvedIntent:
    """Keyword and pattern matching used when the language model is unavailable or fails."""
    lower_message = message.lower()

    if "balance" in lower_message:
        return ResolvedIntent(intent=Intent.BALANCE_CHECK)

    if "fund" in lower_message or "add money" in lower_message or "top up" in lower_message:
        return ResolvedIntent(intent=Intent.WALLET_FUND, amount=_amount_outside_phone(message))

    if "transaction" in lower_message or "history" in lower_message or "last" in lower_message:
        return ResolvedIntent(intent=Intent.TRANSACTIONS)

    if "monthly" in lower_message or "report" in lower_message or "summary" in lower_message:
        return ResolvedIntent(intent=Intent.MONTHLY_REPORT)

    if "set pin" in lower_message or "new pin" in lower_message:
        return ResolvedIntent(intent=Intent.SET_PIN)

    if "change pin" in lower_message or "reset pin" in lower_message:
        return ResolvedIntent(intent=Intent.CHANGE_PIN)

    phone_match = PHONE.search(message)
    network_match = NETWORK.search(message)

    if "airtime" in lower_message or "recharge" in lower_message:
        return ResolvedIntent(
            intent=Intent.AIRTIME_PURCHASE,
            amount=_amount_outside_phone(message),
            network=network_match.group(1) if network_match else None,
            phone_number=phone_match.group(1) if phone_match else None,
        )

    size_match = DATA_SIZE.search(message)
    if "data" in lower_message or size_match:
        network = network_match.group(1) if network_match else None
        if network is None:
            candidate = NETWORK_BEFORE_DATA.search(message)
            if candidate and candidate.group(1).lower() not in NOT_A_NETWORK and not DATA_SIZE.fullmatch(
                candidate.group(1)
            ):
                network = candidate.group(1)
        return ResolvedIntent(
            intent=Intent.DATA_PURCHASE,
            network=network,
            phone_number=phone_match.group(1) if phone_match else None,
            data_size=f"{size_match.group(1)}{size_match.group(2).upper()}" if size_match else None,
        )

    return ResolvedIntent(intent=Intent.UNKNOWN)


class IntentParser:
    """Resolves free text into a ResolvedIntent. Never raises."""

    def __init__(self, openai_api_key: str | None = None, llm: ChatOpenAI | None = None):
        api_key = openai_api_key if openai_api_key is not None else settings.OPENAI_API_KEY
        self.llm = llm
        if self.llm is None and api_key:
            llm_kwargs = {"model": settings.OPENAI_MODEL, "temperature": 0, "api_key": api_key}
            if settings.OPENAI_BASE_URL:
                llm_kwargs["base_url"] = settings.OPENAI_BASE_URL
            self.llm = ChatOpenAI(**llm_kwargs)

        if self.llm is None:
            logger.warning("OPENAI_API_KEY not configured. Intent extraction uses pattern matching only.")

    async def parse_intent(self, text: str) -> ResolvedIntent:
        if self.llm is None:
            return parse_intent_fallback(text)

        try:
            response = await self.llm.ainvoke(
                [SystemMessage(content=INTENT_SYSTEM_PROMPT), HumanMessage(content=text)]
            )
            match = JSON_OBJECT.search(str(response.content))
            if match:
                return ResolvedIntent.model_validate(json.loads(match.group(0)))
            logger.warning("Language model reply had no JSON object, using pattern matching")
        except Exception as e:
            logger.error(f"Error parsing intent with the language model: {str(e)}", exc_info=True)

        return parse_intent_fallback(text)
