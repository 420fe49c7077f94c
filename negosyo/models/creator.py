"""Creators: field agents who onboard businesses and earn a payout per paid submission."""
import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Numeric, String, Text

from negosyo.database import Base
from negosyo.models._base import utcnow

CREATOR_STATUSES = ("pending", "active", "suspended")
CREATOR_ROLES = ("creator", "admin")


class Creator(Base):
    """Creator identity and payout account.

    ``balance`` is the withdrawable amount, ``total_earnings`` the lifetime sum of
    credits. Both are only ever mutated by the payout ledger.
    """
    __tablename__ = "creators"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    phone = Column(String(20), nullable=True)
    referral_code = Column(String(16), unique=True, nullable=False)
    referred_by_id = Column(String(36), ForeignKey("creators.id"), nullable=True)
    balance = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    total_earnings = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    status = Column(String(20), nullable=False, default="pending")  # pending, active, suspended
    role = Column(String(20), nullable=False, default="creator")  # creator, admin
    payout_method = Column(String(30), nullable=True)  # gcash, maya, bank
    payout_details = Column(Text, default="{}")  # JSON: account name/number
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_creator_balance_non_negative"),
        CheckConstraint("balance <= total_earnings", name="ck_creator_balance_within_earnings"),
        Index("idx_creator_status", "status"),
        Index("idx_creator_referred_by", "referred_by_id"),
    )

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)
