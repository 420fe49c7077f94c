"""Append-only audit trail of payout ledger credits."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, Numeric, String

from negosyo.database import Base
from negosyo.models._base import utcnow


class PayoutLedgerEntry(Base):
    __tablename__ = "payout_ledger"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    creator_id = Column(String(36), ForeignKey("creators.id"), nullable=False)
    submission_id = Column(String(36), ForeignKey("submissions.id"), nullable=False)
    entry_type = Column(String(20), nullable=False, default="credit")
    amount = Column(Numeric(18, 2), nullable=False)
    balance_after = Column(Numeric(18, 2), nullable=False)
    total_earnings_after = Column(Numeric(18, 2), nullable=False)
    actor_id = Column(String(36), nullable=True)
    idempotency_key = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_payout_ledger_creator", "creator_id", "created_at"),
    )
