from sqlalchemy import BigInteger, Column, Integer, String

from quickwallet.common.entities.base import BaseEntity


class UserEntity(BaseEntity):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    telegram_id = Column(BigInteger, unique=True, nullable=False, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(20), unique=True, nullable=False, index=True)
    pin_hash = Column(String(255), nullable=True)

    @property
    def has_pin(self) -> bool:
        return bool(self.pin_hash)

    def __repr__(self):
        return f"<User(id={self.id}, telegram_id={self.telegram_id}, email='{self.email}')>"
