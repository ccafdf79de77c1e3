import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quickwallet.common.repositories import session_scope
from quickwallet.modules.users.dtos.user import UserProfile, UserRegister
from quickwallet.modules.users.entities import User
from quickwallet.modules.users.repositories.user_repository import UserRepository
from quickwallet.modules.users.services.pin_hasher import PinHasher
from quickwallet.modules.wallets.repositories.wallet_repository import WalletRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], pin_hasher: PinHasher | None = None):
        self.session_factory = session_factory
        self.pin_hasher = pin_hasher or PinHasher()

    async def get_by_telegram_id(self, telegram_id: int) -> UserProfile | None:
        async with session_scope(self.session_factory) as session:
            user = await UserRepository(session).get_by_telegram_id(telegram_id)
            return UserProfile.model_validate(user) if user else None

    async def email_exists(self, email: str) -> bool:
        async with session_scope(self.session_factory) as session:
            return await UserRepository(session).email_exists(email)

    async def phone_exists(self, phone_number: str) -> bool:
        async with session_scope(self.session_factory) as session:
            return await UserRepository(session).phone_exists(phone_number)

    async def create_account(self, user_data: UserRegister) -> UserProfile:
        """
        Creates the user and a zero-balance wallet in one database transaction.

        Raises:
            PersistenceFailure: If either insert fails; neither row is kept
        """
        async with session_scope(self.session_factory) as session:
            user = await UserRepository(session).create(
                User(
                    telegram_id=user_data.telegram_id,
                    first_name=user_data.first_name,
                    last_name=user_data.last_name,
                    email=user_data.email,
                    phone_number=user_data.phone_number,
                )
            )
            await WalletRepository(session).create_for_user(user.id)
            profile = UserProfile.model_validate(user)

        logger.info(f"Account created: user_id={profile.id}, telegram_id={profile.telegram_id}")
        return profile

    async def set_pin(self, user_id: int, pin: str) -> bool:
        pin_hash = await self.pin_hasher.hash(pin)
        async with session_scope(self.session_factory) as session:
            updated = await UserRepository(session).set_pin_hash(user_id, pin_hash)
        if updated:
            logger.info(f"Transaction PIN set for user_id={user_id}")
        else:
            logger.warning(f"PIN not set, user_id={user_id} does not exist")
        return updated

    async def verify_pin(self, user_id: int, pin: str) -> bool:
        async with session_scope(self.session_factory) as session:
            user = await UserRepository(session).get_by_id(user_id)
            digest = user.pin_hash if user else None
        return await self.pin_hasher.verify(pin, digest)
