"""
Imports every ORM model so Base.metadata knows about all tables.

Used by Alembic autogenerate and by the test suite to build the schema.
"""
from app.platform.db.base import Base
from app.features.auth.models.user import User
from app.features.referral.models.referral import ReferralEntry
from app.features.leads.models.lead_model import Lead, LeadSequence
from app.features.leads.models.email_feedback import EmailFeedback, EmailFeedbackRecipient
from app.features.compose.models.compose_response import ComposeResponse

__all__ = [
    "Base",
    "User",
    "ReferralEntry",
    "Lead",
    "LeadSequence",
    "EmailFeedback",
    "EmailFeedbackRecipient",
    "ComposeResponse",
]
