from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from app.platform.db.base import BaseModel


class ReferralEntry(BaseModel):
    """
    One referred sign-up attributed to a referrer.

    Entries start inactive and are activated by process_referral_reward
    once the referred user's subscription payment succeeds.
    """
    __tablename__ = "referral_entries"

    # User who shared the referral code
    referrer_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # User who signed up with the code
    referred_user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)
    subscription_status = Column(String(20), default="pending", nullable=False)

    referrer = relationship("User", foreign_keys=[referrer_id], back_populates="referrals")
    referred_user = relationship("User", foreign_keys=[referred_user_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint("referrer_id", "referred_user_id", name="uq_referrer_referred_user"),
        Index("idx_referral_entries_referred", "referred_user_id"),
    )
