from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from app.platform.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    # Referral code is shared with prospective sign-ups
    referral_code = Column(String(12), unique=True, nullable=True, index=True)
    referred_by_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    subscription_status = Column(String(20), default="inactive", nullable=False)
    subscription_end_date = Column(DateTime(timezone=True), nullable=True)

    # Derived from referral entries, see update_referral_stats
    total_referrals = Column(Integer, default=0, nullable=False)
    active_referrals = Column(Integer, default=0, nullable=False)
    total_earnings = Column(Numeric(12, 2), default=0, nullable=False)

    referrals = relationship(
        "ReferralEntry",
        foreign_keys="ReferralEntry.referrer_id",
        back_populates="referrer",
        order_by="ReferralEntry.joined_at",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, name={self.name})>"
