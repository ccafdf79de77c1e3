import logging
from decimal import Decimal
from typing import Any, Awaitable, Callable

from langgraph.graph import END, StateGraph

from quickwallet.common.enums.dialog_step import DialogStep
from quickwallet.common.enums.intent import Intent
from quickwallet.common.enums.purchase_outcome import PurchaseOutcome
from quickwallet.common.enums.transaction_kind import TransactionKind
from quickwallet.common.exceptions import CompensationFailure, NotRegistered, PersistenceFailure, ValidationError
from quickwallet.configuration.config import settings
from quickwallet.modules.conversations import messages
from quickwallet.modules.conversations.agent.agent_state import AgentState
from quickwallet.modules.conversations.agent.intent_parser import IntentParser
from quickwallet.modules.conversations.dtos.conversation import (
    ConversationState,
    InboundMessage,
    PurchaseRequest,
    PurchaseResult,
)
from quickwallet.modules.conversations.dtos.intent import ResolvedIntent
from quickwallet.modules.conversations.services.purchase_orchestrator import PurchaseOrchestrator
from quickwallet.modules.conversations.services.state_store import ConversationStateStore
from quickwallet.modules.conversations.utils.validators import (
    is_valid_email,
    is_valid_phone_number,
    is_valid_pin,
    parse_amount,
    validate_name,
)
from quickwallet.modules.fulfillment.services.fulfillment_service import FulfillmentService
from quickwallet.modules.transactions.services.transactions_service import TransactionsService
from quickwallet.modules.users.dtos.user import UserProfile, UserRegister
from quickwallet.modules.users.services.user_service import UserService
from quickwallet.modules.wallets.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

StepHandler = Callable[[InboundMessage, UserProfile | None, ConversationState], Awaitable[dict[str, Any]]]
IntentHandler = Callable[[InboundMessage, UserProfile, ResolvedIntent], Awaitable[dict[str, Any]]]

START_COMMAND = "/start"


def _reply(*texts: str) -> dict[str, Any]:
    return {"replies": list(texts)}


def _transition(next_conversation: ConversationState | None, *texts: str) -> dict[str, Any]:
    return {"replies": list(texts), "next_conversation": next_conversation, "state_changed": True}


def _command_name(text: str) -> str:
    # "/start@QuickWalletBot payload" -> "/start"
    return text.strip().split()[0].split("@")[0].lower() if text.strip() else ""


class DialogAgent:
    """
    Advances one user's conversation by one inbound message.

    The graph loads the user and their dialog state, routes the message by the
    precedence rules (registration gate, active step, slash command, free-text
    intent) and produces replies plus the next dialog state. The state is only
    written once the graph finished, so a failure keeps the previous step.
    """

    def __init__(
        self,
        users: UserService,
        ledger: LedgerService,
        transactions: TransactionsService,
        fulfillment: FulfillmentService,
        orchestrator: PurchaseOrchestrator,
        state_store: ConversationStateStore,
        intent_parser: IntentParser,
        transport=None,
    ):
        self.users = users
        self.ledger = ledger
        self.transactions = transactions
        self.fulfillment = fulfillment
        self.orchestrator = orchestrator
        self.state_store = state_store
        self.intent_parser = intent_parser
        self.transport = transport

        self.step_handlers: dict[DialogStep, StepHandler] = {
            DialogStep.FIRST_NAME: self._on_first_name,
            DialogStep.LAST_NAME: self._on_last_name,
            DialogStep.EMAIL: self._on_email,
            DialogStep.PHONE_NUMBER: self._on_phone_number,
            DialogStep.SET_PIN: self._on_set_pin,
            DialogStep.CONFIRM_PURCHASE: self._on_confirm_purchase,
            DialogStep.ENTER_PIN: self._on_enter_pin,
            DialogStep.FUND_AMOUNT: self._on_fund_amount,
        }
        self.intent_handlers: dict[Intent, IntentHandler] = {
            Intent.BALANCE_CHECK: self._on_balance_check,
            Intent.WALLET_FUND: self._on_wallet_fund,
            Intent.AIRTIME_PURCHASE: self._on_airtime_purchase,
            Intent.DATA_PURCHASE: self._on_data_purchase,
            Intent.TRANSACTIONS: self._on_transactions,
            Intent.MONTHLY_REPORT: self._on_monthly_report,
            Intent.SET_PIN: self._on_set_pin_intent,
            Intent.CHANGE_PIN: self._on_set_pin_intent,
            Intent.UNKNOWN: self._on_unknown,
        }
        self._check_handler_tables()
        self.graph = self._build_graph()

    def _check_handler_tables(self):
        missing_steps = set(DialogStep) - set(self.step_handlers)
        missing_intents = set(Intent) - set(self.intent_handlers)
        if missing_steps or missing_intents:
            raise RuntimeError(
                f"Dialog handler tables incomplete: steps={sorted(s.value for s in missing_steps)}, "
                f"intents={sorted(i.value for i in missing_intents)}"
            )

    def _build_graph(self):
        workflow = StateGraph(AgentState)

        workflow.add_node("load_context", self._load_context)
        workflow.add_node("handle_step", self._handle_step)
        workflow.add_node("handle_command", self._registration_gate(self._handle_command))
        workflow.add_node("handle_intent", self._registration_gate(self._handle_intent))

        workflow.set_entry_point("load_context")

        workflow.add_conditional_edges(
            "load_context",
            self._route,
            {
                "handle_step": "handle_step",
                "handle_command": "handle_command",
                "handle_intent": "handle_intent",
            },
        )

        for node in ("handle_step", "handle_command", "handle_intent"):
            workflow.add_edge(node, END)

        return workflow.compile()

    async def handle(self, message: InboundMessage) -> list[str]:
        """Runs the graph for one message and returns the replies to send."""
        initial_state: AgentState = {
            "message": message,
            "replies": [],
            "state_changed": False,
        }
        final_state = await self.graph.ainvoke(initial_state)

        if final_state.get("state_changed"):
            next_conversation = final_state.get("next_conversation")
            if next_conversation is None:
                await self.state_store.clear(message.user_id)
            else:
                await self.state_store.set(message.user_id, next_conversation)

        return final_state.get("replies") or []

    async def _purge(self, message: InboundMessage):
        if self.transport is None or message.message_id is None:
            return
        try:
            deleted = await self.transport.delete_message(message.chat_id, message.message_id)
        except Exception as e:
            logger.warning(f"Could not delete PIN message in chat {message.chat_id}: {str(e)}")
            return
        if not deleted:
            logger.warning(f"PIN message {message.message_id} in chat {message.chat_id} was not deleted")

    # Graph nodes

    async def _load_context(self, state: AgentState) -> dict[str, Any]:
        telegram_id = state["message"].user_id
        user = await self.users.get_by_telegram_id(telegram_id)
        conversation = await self.state_store.get(telegram_id)
        return {"user": user, "conversation": conversation}

    @staticmethod
    def _route(state: AgentState) -> str:
        user = state.get("user")
        conversation = state.get("conversation")
        text = state["message"].text

        if conversation is not None and (user is not None or conversation.step.is_registration):
            return "handle_step"
        if text.strip().startswith("/"):
            return "handle_command"
        return "handle_intent"

    @staticmethod
    def _registration_gate(node: Callable[[AgentState], Awaitable[dict[str, Any]]]):
        """Answers NotRegistered raised by `node` with the registration prompt."""

        async def gated(state: AgentState) -> dict[str, Any]:
            try:
                return await node(state)
            except NotRegistered as e:
                logger.info(f"Message from unregistered telegram_id={e.telegram_id}")
                update = _reply(messages.REGISTER_FIRST)
                if state.get("conversation") is not None:
                    # A purchase or PIN step left behind by an account that no longer exists
                    update.update(next_conversation=None, state_changed=True)
                return update

        return gated

    @staticmethod
    def _registered_user(state: AgentState) -> UserProfile:
        user = state.get("user")
        if user is None:
            raise NotRegistered(state["message"].user_id)
        return user

    async def _handle_step(self, state: AgentState) -> dict[str, Any]:
        message = state["message"]
        conversation = state["conversation"]
        if conversation.step.carries_secret:
            await self._purge(message)

        handler = self.step_handlers[conversation.step]
        try:
            return await handler(message, state.get("user"), conversation)
        except ValidationError as e:
            return _reply(e.prompt)

    async def _handle_command(self, state: AgentState) -> dict[str, Any]:
        message = state["message"]
        user = state.get("user")
        command = _command_name(message.text)

        if command == START_COMMAND:
            if user is not None:
                return _reply(messages.welcome_back(user.first_name))
            return _transition(ConversationState(step=DialogStep.FIRST_NAME), messages.WELCOME_NEW)

        user = self._registered_user(state)
        if command == "/balance":
            return await self._balance_reply(user)
        if command == "/help":
            return _reply(messages.HELP)
        return _reply(messages.UNKNOWN_COMMAND)

    async def _handle_intent(self, state: AgentState) -> dict[str, Any]:
        message = state["message"]
        user = self._registered_user(state)
        resolved = await self.intent_parser.parse_intent(message.text)
        logger.info(f"Intent for user {message.user_id}: {resolved.intent.value}")
        return await self.intent_handlers[resolved.intent](message, user, resolved)

    # Registration steps

    async def _on_first_name(self, message, user, conversation) -> dict[str, Any]:
        first_name = self._checked_name(message.text)
        return _transition(
            conversation.advance(DialogStep.LAST_NAME, first_name=first_name),
            messages.ASK_LAST_NAME.format(first_name=first_name),
        )

    async def _on_last_name(self, message, user, conversation) -> dict[str, Any]:
        last_name = self._checked_name(message.text)
        return _transition(
            conversation.advance(DialogStep.EMAIL, last_name=last_name),
            messages.ASK_EMAIL.format(first_name=conversation.data.get("first_name", ""), last_name=last_name),
        )

    @staticmethod
    def _checked_name(text: str) -> str:
        is_valid, error = validate_name(text)
        if not is_valid:
            raise ValidationError(error)
        return text.strip()

    async def _on_email(self, message, user, conversation) -> dict[str, Any]:
        email = message.text.strip()
        if not is_valid_email(email):
            raise ValidationError(messages.INVALID_EMAIL)
        if await self.users.email_exists(email):
            raise ValidationError(messages.EMAIL_TAKEN)
        return _transition(conversation.advance(DialogStep.PHONE_NUMBER, email=email.lower()), messages.ASK_PHONE)

    async def _on_phone_number(self, message, user, conversation) -> dict[str, Any]:
        phone_number = message.text.strip()
        if not is_valid_phone_number(phone_number):
            raise ValidationError(messages.INVALID_PHONE)
        if await self.users.phone_exists(phone_number):
            raise ValidationError(messages.PHONE_TAKEN)

        profile = await self.users.create_account(
            UserRegister(
                telegram_id=message.user_id,
                first_name=conversation.data["first_name"],
                last_name=conversation.data["last_name"],
                email=conversation.data["email"],
                phone_number=phone_number,
            )
        )
        return _transition(
            ConversationState(step=DialogStep.SET_PIN, data={"user_id": profile.id}),
            messages.ASK_PIN_AFTER_REGISTRATION,
        )

    async def _on_set_pin(self, message, user, conversation) -> dict[str, Any]:
        pin = message.text.strip()
        if not is_valid_pin(pin):
            raise ValidationError(messages.INVALID_PIN_FORMAT)

        user_id = conversation.data.get("user_id") or (user.id if user else None)
        if user_id is None or not await self.users.set_pin(user_id, pin):
            return _transition(None, messages.PIN_NOT_SET)
        return _transition(None, messages.PIN_SET)

    # Purchase steps

    async def _on_confirm_purchase(self, message, user, conversation) -> dict[str, Any]:
        if message.text.strip().lower() != "yes":
            return _transition(None, messages.PURCHASE_CANCELLED)

        if settings.REQUIRE_PIN_FOR_PURCHASES and user.has_pin:
            return _transition(conversation.advance(DialogStep.ENTER_PIN), messages.ASK_TRANSACTION_PIN)
        return await self._hand_off(message, user, conversation)

    async def _on_enter_pin(self, message, user, conversation) -> dict[str, Any]:
        if not await self.users.verify_pin(user.id, message.text.strip()):
            logger.info(f"Wrong transaction PIN for user_id={user.id}, purchase cancelled")
            return _transition(None, messages.WRONG_PIN)
        return await self._hand_off(message, user, conversation)

    async def _hand_off(self, message, user, conversation) -> dict[str, Any]:
        request = PurchaseRequest.model_validate(conversation.data["purchase"])
        try:
            result = await self.orchestrator.execute(user.id, request)
        except CompensationFailure as e:
            result = PurchaseResult(outcome=PurchaseOutcome.PROVIDER_FAILED, message=str(e))
        finally:
            await self.state_store.clear(message.user_id)
        return _transition(None, self._purchase_reply(result))

    @staticmethod
    def _purchase_reply(result: PurchaseResult) -> str:
        if result.outcome is PurchaseOutcome.SUCCESS:
            return messages.purchase_success(result.message, result.reference, result.new_balance)
        if result.outcome is PurchaseOutcome.REFUNDED:
            return messages.purchase_refunded(result.message, result.new_balance)
        if result.outcome is PurchaseOutcome.INSUFFICIENT_FUNDS:
            return messages.INSUFFICIENT_BALANCE
        return messages.purchase_needs_support(result.reference)

    async def _on_fund_amount(self, message, user, conversation) -> dict[str, Any]:
        minimum = messages.naira(settings.MIN_FUNDING_AMOUNT)
        is_valid, amount, _ = parse_amount(message.text)
        if not is_valid or amount < settings.MIN_FUNDING_AMOUNT:
            raise ValidationError(messages.FUND_AMOUNT_TOO_LOW.format(minimum=minimum))

        try:
            reply = await self._funding_reply(user, amount)
        finally:
            await self.state_store.clear(message.user_id)
        return _transition(None, reply)

    async def _funding_reply(self, user: UserProfile, amount: Decimal) -> str:
        result = await self.orchestrator.fund(user, amount)
        if result.success:
            return messages.payment_link(amount, result.reference, result.payment_url)
        return messages.payment_link_failed(result.message)

    # Intents

    async def _balance_reply(self, user: UserProfile) -> dict[str, Any]:
        try:
            balance = await self.ledger.get_balance(user.id)
        except PersistenceFailure:
            return _reply(messages.BALANCE_UNAVAILABLE)
        return _reply(messages.balance(balance, settings.LOW_BALANCE_THRESHOLD))

    async def _on_balance_check(self, message, user, resolved) -> dict[str, Any]:
        return await self._balance_reply(user)

    async def _on_wallet_fund(self, message, user, resolved) -> dict[str, Any]:
        amount = resolved.amount
        if amount is None or amount < settings.MIN_FUNDING_AMOUNT or amount.as_tuple().exponent < -2:
            return _transition(
                ConversationState(step=DialogStep.FUND_AMOUNT),
                messages.ASK_FUND_AMOUNT.format(minimum=messages.naira(settings.MIN_FUNDING_AMOUNT)),
            )
        return _reply(await self._funding_reply(user, amount))

    async def _on_airtime_purchase(self, message, user, resolved) -> dict[str, Any]:
        missing = []
        if resolved.amount is None or resolved.amount.as_tuple().exponent < -2:
            missing.append("amount")
        if resolved.network is None:
            missing.append("network (MTN, Airtel, Glo or 9mobile)")
        if not resolved.phone_number:
            missing.append("phone number")
        if missing:
            return _reply(messages.AIRTIME_DETAILS_NEEDED.format(missing=", ".join(missing)))

        if not is_valid_phone_number(resolved.phone_number):
            return _reply(messages.INVALID_PHONE)

        request = PurchaseRequest(
            kind=TransactionKind.AIRTIME,
            amount=resolved.amount,
            network=resolved.network,
            phone_number=resolved.phone_number,
        )
        return await self._stage_purchase(user, request)

    async def _on_data_purchase(self, message, user, resolved) -> dict[str, Any]:
        if resolved.mentions_unknown_network:
            listing = await self.fulfillment.get_data_plans(resolved.raw_network)
            return _reply(messages.data_plans(listing, requested_network=resolved.raw_network))
        if resolved.network is None or not resolved.data_size:
            return _reply(messages.DATA_DETAILS_NEEDED)

        listing = await self.fulfillment.get_data_plans(resolved.network)
        plan = listing.find(resolved.data_size)
        if plan is None:
            return _reply(messages.data_plans(listing, plan_missing=True))

        phone_number = resolved.phone_number or user.phone_number
        if not is_valid_phone_number(phone_number):
            return _reply(messages.INVALID_PHONE)

        request = PurchaseRequest(
            kind=TransactionKind.DATA,
            amount=plan.amount,
            network=resolved.network,
            phone_number=phone_number,
            data_size=resolved.data_size,
            plan_name=plan.name,
            variation_code=plan.code,
        )
        return await self._stage_purchase(user, request)

    async def _stage_purchase(self, user: UserProfile, request: PurchaseRequest) -> dict[str, Any]:
        try:
            balance = await self.ledger.get_balance(user.id)
        except PersistenceFailure:
            return _reply(messages.BALANCE_UNAVAILABLE)
        if balance < request.amount:
            return _reply(messages.INSUFFICIENT_BALANCE)

        return _transition(
            ConversationState(
                step=DialogStep.CONFIRM_PURCHASE,
                data={"purchase": request.model_dump(mode="json")},
            ),
            messages.confirm_purchase(request),
        )

    async def _on_transactions(self, message, user, resolved) -> dict[str, Any]:
        records = await self.transactions.get_recent(user.id, settings.TRANSACTION_HISTORY_LIMIT)
        return _reply(messages.transaction_history(records))

    async def _on_monthly_report(self, message, user, resolved) -> dict[str, Any]:
        summary = await self.transactions.get_monthly_summary(user.id)
        try:
            balance = await self.ledger.get_balance(user.id)
        except PersistenceFailure:
            balance = None
        return _reply(messages.monthly_report(summary, balance))

    async def _on_set_pin_intent(self, message, user, resolved) -> dict[str, Any]:
        return _transition(
            ConversationState(step=DialogStep.SET_PIN, data={"user_id": user.id}),
            messages.ASK_NEW_PIN,
        )

    async def _on_unknown(self, message, user, resolved) -> dict[str, Any]:
        return _reply(messages.CAPABILITIES)
