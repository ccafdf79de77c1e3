import asyncio
import logging

import bcrypt

from quickwallet.configuration.config import settings

logger = logging.getLogger(__name__)


class PinHasher:
    """One-way hashing for transaction PINs. bcrypt runs in a worker thread to keep the event loop free."""

    def __init__(self, rounds: int | None = None):
        self.rounds = rounds or settings.PIN_HASH_ROUNDS

    def _hash(self, pin: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(pin.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    @staticmethod
    def _verify(pin: str, digest: str) -> bool:
        try:
            return bcrypt.checkpw(pin.encode("utf-8"), digest.encode("utf-8"))
        except ValueError:
            logger.warning("Stored PIN hash is malformed, verification rejected")
            return False

    async def hash(self, pin: str) -> str:
        return await asyncio.to_thread(self._hash, pin)

    async def verify(self, pin: str, digest: str | None) -> bool:
        if not digest:
            return False
        return await asyncio.to_thread(self._verify, pin, digest)
