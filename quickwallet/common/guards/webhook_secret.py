import hashlib
import hmac

from fastapi import Header, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from quickwallet.configuration.config import settings

# Header Telegram sends when the webhook was registered with a secret_token
telegram_secret_header = APIKeyHeader(name="X-Telegram-Bot-Api-Secret-Token", auto_error=False)


async def verify_telegram_secret(secret: str = Security(telegram_secret_header)) -> None:
    """
    Dependency checking the Telegram webhook secret.

    The check is skipped when TELEGRAM_WEBHOOK_SECRET is empty (local polling setups).

    Raises:
        HTTPException: If the secret is missing or does not match
    """
    if not settings.TELEGRAM_WEBHOOK_SECRET:
        return

    if not secret or not hmac.compare_digest(secret, settings.TELEGRAM_WEBHOOK_SECRET):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid webhook secret",
        )


def paystack_signature(body: bytes, secret_key: str) -> str:
    return hmac.new(secret_key.encode("utf-8"), body, hashlib.sha512).hexdigest()


async def verify_paystack_signature(
    request: Request,
    x_paystack_signature: str | None = Header(default=None),
) -> bytes:
    """
    Dependency validating the HMAC-SHA512 signature Paystack puts on webhook calls.

    Returns:
        bytes: The raw request body, already verified
    """
    body = await request.body()
    if not settings.PAYSTACK_SECRET_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Paystack is not configured on this server",
        )

    expected = paystack_signature(body, settings.PAYSTACK_SECRET_KEY)
    if not x_paystack_signature or not hmac.compare_digest(expected, x_paystack_signature):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Paystack signature",
        )
    return body
