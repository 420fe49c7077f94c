"""Submissions: one business-onboarding case moving through review, publish and payout."""
import uuid
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Numeric, String, Text

from negosyo.database import Base
from negosyo.models._base import load_json, utcnow


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    creator_id = Column(String(36), ForeignKey("creators.id"), nullable=False)

    # Business identity
    business_name = Column(String(200), nullable=False)
    business_type = Column(String(100), nullable=False)
    owner_name = Column(String(200), nullable=False)
    owner_phone = Column(String(30), nullable=False)
    owner_email = Column(String(255), nullable=True)
    address = Column(String(500), nullable=False)
    city = Column(String(100), nullable=False)

    # Media
    photos = Column(Text, nullable=False, default="[]")  # JSON list of {"url", "dominant_color"}
    video_url = Column(String(1000), nullable=True)
    audio_url = Column(String(1000), nullable=True)
    transcript = Column(Text, nullable=True)
    extracted_content = Column(Text, nullable=True)  # JSON BusinessContent from the LLM
    terms_agreed = Column(Boolean, nullable=False, default=False)

    status = Column(String(30), nullable=False, default="draft")
    rejection_reason = Column(Text, nullable=True)
    website_url = Column(String(500), nullable=True)

    # Money
    amount = Column(Numeric(18, 2), nullable=False, default=Decimal("1000"))
    creator_payout = Column(Numeric(18, 2), nullable=False, default=Decimal("500"))

    # Lifecycle timestamps
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    payout_requested_at = Column(DateTime(timezone=True), nullable=True)
    creator_paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_submission_amount_non_negative"),
        CheckConstraint("creator_payout >= 0", name="ck_submission_payout_non_negative"),
        CheckConstraint(
            "creator_paid_at IS NULL OR status IN ('paid', 'completed')",
            name="ck_submission_creator_paid_requires_paid",
        ),
        Index("idx_submission_creator", "creator_id"),
        Index("idx_submission_status", "status"),
    )

    @property
    def photo_list(self) -> list[dict]:
        return load_json(self.photos, [])

    @property
    def has_interview(self) -> bool:
        return bool(self.video_url or self.audio_url)
