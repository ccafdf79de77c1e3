from sqlalchemy import Column, Enum, ForeignKey, Integer, Numeric, String

from quickwallet.common.entities.base import BaseEntity
from quickwallet.common.enums.transaction_kind import TransactionKind
from quickwallet.common.enums.transaction_status import TransactionStatus


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


class TransactionEntity(BaseEntity):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    kind = Column(
        Enum(TransactionKind, name="transactionkind", values_callable=_enum_values),
        nullable=False,
    )
    amount = Column(Numeric(14, 2, asdecimal=True), nullable=False)
    network = Column(String(16), nullable=True)
    phone_number = Column(String(20), nullable=True)
    status = Column(
        Enum(TransactionStatus, name="transactionstatus", values_callable=_enum_values),
        nullable=False,
        default=TransactionStatus.PENDING,
    )
    description = Column(String(255), nullable=False, default="")
    reference = Column(String(100), unique=True, nullable=True, index=True)

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, kind='{self.kind.value}', amount={self.amount}, "
            f"status='{self.status.value}')>"
        )
