from decimal import Decimal
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base


class Settings(BaseSettings):
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./quickwallet.db", description="Async database connection URL"
    )
    APP_NAME: str = "QuickWallet Agent"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    TELEGRAM_BOT_TOKEN: str = Field(default="", description="Telegram Bot API token")
    TELEGRAM_API_URL: str = Field(default="https://api.telegram.org", description="Telegram Bot API base URL")
    TELEGRAM_WEBHOOK_SECRET: str = Field(
        default="", description="Secret expected in X-Telegram-Bot-Api-Secret-Token (empty disables the check)"
    )

    OPENAI_API_KEY: str = Field(default="", description="OpenAI API Key for intent extraction")
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", description="OpenAI model used for intent extraction")
    OPENAI_BASE_URL: str = Field(
        default="", description="OpenAI API base URL (optional, for proxy or compatible services)"
    )

    VTPASS_BASE_URL: str = Field(default="https://vtpass.com/api", description="VTPass API base URL")
    VTPASS_API_KEY: str = Field(default="", description="VTPass api-key header")
    VTPASS_SECRET_KEY: str = Field(default="", description="VTPass secret-key header (POST requests)")
    VTPASS_PUBLIC_KEY: str = Field(default="", description="VTPass public-key header (GET requests)")

    PAYSTACK_BASE_URL: str = Field(default="https://api.paystack.co", description="Paystack API base URL")
    PAYSTACK_SECRET_KEY: str = Field(default="", description="Paystack secret key")
    PAYSTACK_CALLBACK_URL: str = Field(
        default="http://localhost:3000/api/v1/payments/callback",
        description="URL Paystack redirects to after a hosted payment",
    )

    REDIS_URL: str = Field(default="", description="Redis URL for conversation state (empty keeps it in-process)")
    REDIS_TTL: int = Field(default=3600, description="TTL in seconds for conversation state entries")

    HTTP_TIMEOUT: float = Field(default=30.0, description="Timeout in seconds for provider HTTP calls")
    MIN_FUNDING_AMOUNT: Decimal = Field(default=Decimal("100"), description="Minimum wallet funding amount (NGN)")
    LOW_BALANCE_THRESHOLD: Decimal = Field(default=Decimal("100"), description="Balance below which a hint is shown")
    REQUIRE_PIN_FOR_PURCHASES: bool = Field(
        default=True, description="Ask for the transaction PIN after a purchase is confirmed"
    )
    PIN_HASH_ROUNDS: int = Field(default=12, ge=4, le=31, description="bcrypt cost factor for PIN hashes")
    TRANSACTION_HISTORY_LIMIT: int = Field(default=5, description="Rows shown by the transaction history reply")

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


settings = Settings()

# Database
_engine: AsyncEngine | None = None
_SessionFactory: async_sessionmaker[AsyncSession] | None = None

Base = declarative_base()


def get_engine() -> AsyncEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True, echo=settings.DEBUG)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _SessionFactory  # noqa: PLW0603
    if _SessionFactory is None:
        _SessionFactory = async_sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory


async def dispose_engine() -> None:
    global _engine, _SessionFactory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _SessionFactory = None
