from datetime import datetime
from decimal import Decimal

from sqlalchemy import DECIMAL, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
	pass


class ExchangeRateDB(Base):
	__tablename__ = 'exchange_rate'

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	from_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	to_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	rate: Mapped[Decimal] = mapped_column(DECIMAL(precision=20, scale=8), nullable=False)
	last_updated: Mapped[datetime] = mapped_column(DateTime, nullable=False)
	created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

	__table_args__ = (
		Index('idx_from_currency', 'from_currency'),
		Index('idx_to_currency', 'to_currency'),
		Index('idx_last_updated', 'last_updated'),
		UniqueConstraint('from_currency', 'to_currency', name='uk_currency_pair'),
	)

	def __repr__(self):
		return f'<ExchangeRateDB({self.from_currency}/{self.to_currency}={self.rate})>'
