from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, LargeBinary, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql.functions import GenericFunction
from sqlalchemy.types import TypeDecorator

from domain.codec import decode, encode
from domain.rational import Rational


class RationalAsBinary(TypeDecorator):
    impl = LargeBinary
    cache_ok = True

    def process_bind_param(self, value: Rational | None, dialect: object) -> bytes | None:
        if value is None:
            return None
        return encode(value)

    def process_result_value(self, value: bytes | None, dialect: object) -> Rational | None:
        if value is None:
            return None
        return decode(value)


class sum_rat(GenericFunction):
    """Exact per-group sum of a :class:`RationalAsBinary` column.

    Backed by the ``SumRat`` aggregate that :func:`db.db.create_db_engine`
    registers on every SQLite connection.
    """

    type = RationalAsBinary()
    inherit_cache = True


class Base(DeclarativeBase):
    pass


class TransactionOrm(Base):
    __tablename__ = "txs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tx_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    rev_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)

    credits: Mapped[list["CreditOrm"]] = relationship(
        cascade="all, delete-orphan", back_populates="transaction", lazy="selectin"
    )
    debits: Mapped[list["DebitOrm"]] = relationship(
        cascade="all, delete-orphan", back_populates="transaction", lazy="selectin"
    )


class CreditOrm(Base):
    __tablename__ = "credits"

    tx_id: Mapped[int] = mapped_column(Integer, ForeignKey("txs.id"), primary_key=True)
    account: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[Rational] = mapped_column(RationalAsBinary, nullable=False)

    transaction: Mapped[TransactionOrm] = relationship(back_populates="credits")


class DebitOrm(Base):
    __tablename__ = "debits"

    tx_id: Mapped[int] = mapped_column(Integer, ForeignKey("txs.id"), primary_key=True)
    account: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[Rational] = mapped_column(RationalAsBinary, nullable=False)

    transaction: Mapped[TransactionOrm] = relationship(back_populates="debits")
