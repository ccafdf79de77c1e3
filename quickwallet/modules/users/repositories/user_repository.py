from sqlalchemy import select, update

from quickwallet.common.repositories import BaseRepository
from quickwallet.modules.users.entities import User


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_telegram_id(self, telegram_id: int) -> User | None:
        result = await self.session.execute(select(User).where(User.telegram_id == telegram_id))
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(select(User.id).where(User.email == email.strip().lower()))
        return result.first() is not None

    async def phone_exists(self, phone_number: str) -> bool:
        result = await self.session.execute(select(User.id).where(User.phone_number == phone_number.strip()))
        return result.first() is not None

    async def set_pin_hash(self, user_id: int, pin_hash: str) -> bool:
        result = await self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(pin_hash=pin_hash)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
