"""Reply texts sent to Telegram users."""
from decimal import Decimal

from quickwallet.modules.conversations.dtos.conversation import PurchaseRequest
from quickwallet.modules.fulfillment.dtos.provider import DataPlanListing
from quickwallet.modules.transactions.dtos.transaction import MonthlySummary, TransactionRecord


def naira(amount: Decimal | int | str) -> str:
    return f"₦{Decimal(str(amount)):,.2f}"


REGISTER_FIRST = "👋 Welcome! Please start by typing /start to register your account."

WELCOME_NEW = (
    "🎉 Welcome to QuickWallet! 🎉\n\n"
    "💰 Your smart digital wallet for airtime, data, and more!\n\n"
    "📝 Let's get you set up in just a few steps!\n\n"
    "👤 First, what should I call you? Please enter your first name:"
)

ASK_LAST_NAME = "Nice to meet you, {first_name}! 😊\n\n👥 Now, what's your last name?"

ASK_EMAIL = (
    "Perfect, {first_name} {last_name}! 👍\n\n"
    "📧 What's your email address?\n"
    "(We'll use this for payment notifications and monthly reports)"
)

INVALID_EMAIL = "❌ That doesn't look like a valid email address.\n\n📧 Please enter a valid email (example: john@gmail.com):"
EMAIL_TAKEN = "❌ That email is already registered to another account.\n\n📧 Please enter a different email:"

ASK_PHONE = (
    "✅ Email saved successfully!\n\n"
    "📱 What's your phone number?\n"
    "(Please enter 11 digits starting with 0, e.g., 08123456789)"
)

INVALID_PHONE = (
    "❌ That doesn't look like a valid phone number.\n\n"
    "📱 Please enter a valid Nigerian phone number:\n"
    "• Must be 11 digits\n"
    "• Must start with 0\n"
    "• Example: 08123456789"
)
PHONE_TAKEN = "❌ That phone number is already registered.\n\n📱 Please enter a different number:"

ASK_PIN_AFTER_REGISTRATION = (
    "🎉 Congratulations! Your QuickWallet account is ready!\n\n"
    "🔐 For security, please set a transaction PIN:\n"
    "• Use 4-6 digits only\n"
    "• Keep it secret and memorable\n\n"
    "🔢 Enter your PIN now:"
)

ASK_NEW_PIN = "Please enter your new 4-6 digit PIN:"
INVALID_PIN_FORMAT = "❌ Invalid PIN format.\n\n🔢 Please enter exactly 4-6 digits (numbers only):"
PIN_SET = (
    "✅ Your transaction PIN is set!\n\n"
    "🚀 Get started:\n"
    '• Type "fund wallet" to add money\n'
    '• Type "check balance" to see your balance\n'
    '• Say "buy airtime" to purchase airtime\n'
    '• Say "get data" to buy data bundles'
)
PIN_NOT_SET = "❌ Failed to set PIN. Please try again later."

ASK_TRANSACTION_PIN = "🔐 Enter your transaction PIN to authorize this purchase:"
WRONG_PIN = "❌ Invalid PIN. Transaction cancelled."
PURCHASE_CANCELLED = "❌ Purchase cancelled."

ASK_FUND_AMOUNT = "How much would you like to add to your wallet? (minimum {minimum})"
FUND_AMOUNT_TOO_LOW = "Please enter a valid amount (minimum {minimum})."

UNKNOWN_COMMAND = "❓ Unknown command. Type /help to see available commands."
INSUFFICIENT_BALANCE = "❌ Insufficient wallet balance. Please fund your wallet first."
RETRY_LATER = "⚠️ We couldn't complete that right now. Please try again in a moment."
GENERIC_APOLOGY = "❌ Sorry, something went wrong. Please try again later."
BALANCE_UNAVAILABLE = "❌ Unable to fetch your balance right now.\nPlease try again in a moment."

AIRTIME_DETAILS_NEEDED = (
    "Please provide all details: {missing}.\n"
    'Example: "Buy ₦500 MTN airtime for 08123456789"'
)
DATA_DETAILS_NEEDED = 'Please specify the network and data size.\nExample: "Get me 2GB MTN data"'

CAPABILITIES = (
    "🤔 I didn't quite understand that. Here's what I can help you with:\n\n"
    '💰 Wallet: "Check my balance", "Fund my wallet", "Add ₦2000 to wallet"\n'
    '📱 Airtime & Data: "Buy ₦500 MTN airtime for 08123456789", "Get me 2GB Airtel data"\n'
    '📊 Reports: "Show my transactions", "Monthly report"\n'
    '🔐 Security: "Change my PIN", "Set new PIN"\n\n'
    "💡 Just type naturally!"
)

HELP = (
    "🤖 QuickWallet Help\n\n"
    "Commands:\n"
    "/start - Register or restart\n"
    "/balance - Check wallet balance\n"
    "/help - Show this help message\n\n"
    "Examples:\n"
    '• "Check my balance"\n'
    '• "Buy ₦500 MTN airtime for 08123456789"\n'
    '• "Get me 2GB Airtel data"\n'
    '• "Fund my wallet with ₦2000"\n'
    '• "Show my last 5 transactions"\n'
    '• "Monthly report"\n'
    '• "Set a new PIN"\n\n'
    "Networks: MTN, Airtel, Glo, 9mobile"
)


def welcome_back(first_name: str) -> str:
    return (
        f"🎉 Welcome back to QuickWallet, {first_name}!\n\n"
        "🗣️ Just tell me what you want to do in plain English!\n"
        'Example: "Check my balance" or "Buy ₦500 MTN airtime"'
    )


def balance(amount: Decimal, low_threshold: Decimal) -> str:
    hint = (
        '⚠️ Low balance! Type "fund wallet" to add money.'
        if amount < low_threshold
        else "✅ You're all set for transactions!"
    )
    return f"💰 QuickWallet Balance\n\n💵 Current Balance: {naira(amount)}\n\n{hint}"


def confirm_purchase(request: PurchaseRequest) -> str:
    if request.plan_name:
        details = f"Network: {request.network.label}\nPlan: {request.plan_name}\n"
        title = "📊 Confirm Data Purchase:"
    else:
        details = f"Network: {request.network.label}\n"
        title = "📱 Confirm Airtime Purchase:"
    return (
        f"{title}\n\n{details}Amount: {naira(request.amount)}\nPhone: {request.phone_number}\n\n"
        'Type "yes" to confirm or "no" to cancel.'
    )


def data_plans(listing: DataPlanListing, requested_network: str | None = None, plan_missing: bool = False) -> str:
    lines = "\n".join(f"• {plan.name} - {naira(plan.amount)}" for plan in listing.plans)
    if listing.is_fallback or requested_network:
        header = (
            f"❌ {requested_network or 'That network'} isn't supported. "
            f"Supported networks: MTN, Airtel, Glo, 9mobile.\n\nAvailable {listing.network.label} plans:"
        )
    elif plan_missing:
        header = f"❌ Data plan not found. Available {listing.network.label} plans:"
    else:
        header = f"Available {listing.network.label} plans:"
    return f"{header}\n\n{lines}"


def purchase_success(message: str, reference: str | None, new_balance: Decimal | None) -> str:
    text = f"✅ {message}\n\nReference: {reference}"
    if new_balance is not None:
        text += f"\nNew balance: {naira(new_balance)}"
    return text


def purchase_refunded(message: str, new_balance: Decimal | None) -> str:
    text = f"❌ Purchase failed: {message}\nAmount has been refunded to your wallet."
    if new_balance is not None:
        text += f"\nBalance: {naira(new_balance)}"
    return text


def purchase_needs_support(reference: str | None) -> str:
    quote = f"quote reference {reference}" if reference else "share this chat"
    return (
        "❌ Your purchase failed and we could not refund your wallet automatically.\n"
        f"Please contact support and {quote}. Your funds are safe."
    )


def payment_link(amount: Decimal, reference: str, url: str) -> str:
    return (
        "💳 Payment Link Ready!\n\n"
        f"Amount: {naira(amount)}\n"
        f"Reference: {reference}\n\n"
        f"🔗 Click the link below to pay securely:\n{url}\n\n"
        "✅ Your QuickWallet will be credited automatically after payment."
    )


def payment_link_failed(message: str) -> str:
    return f"❌ Failed to generate payment link: {message}"


def wallet_funded(amount: Decimal, new_balance: Decimal) -> str:
    return f"✅ Your wallet was credited with {naira(amount)}.\nNew balance: {naira(new_balance)}"


def transaction_history(records: list[TransactionRecord]) -> str:
    if not records:
        return "📝 No transactions found."

    status_icons = {"completed": "✅", "failed": "❌", "pending": "⏳"}
    lines = ["📝 Your Recent Transactions:\n"]
    for index, record in enumerate(records, start=1):
        lines.append(f"{index}. {status_icons[record.status.value]} {record.kind.value.upper()}")
        lines.append(f"   Amount: {naira(record.amount)}")
        if record.network:
            lines.append(f"   Network: {record.network}")
        if record.phone_number:
            lines.append(f"   Phone: {record.phone_number}")
        if record.created_at:
            lines.append(f"   Date: {record.created_at:%d/%m/%Y}")
        lines.append("")
    return "\n".join(lines).rstrip()


def monthly_report(summary: MonthlySummary, current_balance: Decimal | None) -> str:
    month_name = f"{summary.month_start:%B %Y}"
    if summary.transaction_count == 0:
        return (
            "📊 Monthly Report\n\n"
            f"📅 {month_name}\n\n"
            "📝 No transactions found for this month."
        )

    report = [
        "📊 QuickWallet Monthly Report\n",
        f"📅 {month_name}\n",
        "💰 Financial Summary:",
        f"• Total Funded: {naira(summary.total_funded)}",
        f"• Total Spent: {naira(summary.total_spent)}",
        f"• Net Flow: {naira(summary.net_flow)}\n",
    ]
    if summary.total_spent > 0:
        report.append("📱 Spending Breakdown:")
        if summary.airtime_spent > 0:
            report.append(f"• Airtime: {naira(summary.airtime_spent)}")
        if summary.data_spent > 0:
            report.append(f"• Data: {naira(summary.data_spent)}")
        report.append("")
    report += [
        "📈 Activity:",
        f"• Total Transactions: {summary.transaction_count}",
        f"• Successful: {summary.successful_count}",
        f"• Failed: {summary.failed_count}\n",
    ]
    if current_balance is not None:
        report.append(f"💵 Current Balance: {naira(current_balance)}")
    return "\n".join(report)
