import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from app.platform.db.base import BaseModel


class EmailType(str, enum.Enum):
    bulk = "bulk"
    category = "category"
    city = "city"
    country = "country"
    selected = "selected"


class RecipientStatus(str, enum.Enum):
    sent = "sent"
    failed = "failed"


class EmailFeedback(BaseModel):
    """
    Audit record of a single bulk email send.

    Written once when the send finishes and never updated.
    """
    __tablename__ = "email_feedback"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    email_type = Column(Enum(EmailType, name="email_type"), nullable=False, index=True)

    filter_category = Column(String(255), nullable=True)
    filter_city = Column(String(255), nullable=True)
    filter_country = Column(String(255), nullable=True)

    total_recipients = Column(Integer, default=0, nullable=False)
    success_count = Column(Integer, default=0, nullable=False)
    failed_count = Column(Integer, default=0, nullable=False)
    sent_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    recipients = relationship(
        "EmailFeedbackRecipient",
        back_populates="feedback",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_email_feedback_user_sent", "user_id", "sent_at"),
    )


class EmailFeedbackRecipient(BaseModel):
    __tablename__ = "email_feedback_recipients"

    feedback_id = Column(String, ForeignKey("email_feedback.id", ondelete="CASCADE"), nullable=False, index=True)
    # Leads can be deleted later; the audit entry keeps the copy of email and name
    lead_id = Column(String, ForeignKey("leads.id", ondelete="SET NULL"), nullable=True)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    status = Column(Enum(RecipientStatus, name="recipient_status"), default=RecipientStatus.sent, nullable=False)
    error = Column(Text, nullable=True)

    feedback = relationship("EmailFeedback", back_populates="recipients")
