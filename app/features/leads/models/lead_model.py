from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, String

from app.platform.db.base import Base, BaseModel


class Lead(BaseModel):
    __tablename__ = "leads"

    # Identifier supplied by the spreadsheet, distinct from the store id
    lead_id = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)

    phone = Column(String(50), nullable=True)
    category = Column(String(255), nullable=True, index=True)
    city = Column(String(255), nullable=True, index=True)
    country = Column(String(255), nullable=True, index=True)
    address_street = Column(String(512), nullable=True)
    linkedin = Column(String(512), nullable=True)
    facebook_link = Column(String(512), nullable=True)
    website_link = Column(String(512), nullable=True)
    google_map_link = Column(String(1024), nullable=True)
    instagram = Column(String(512), nullable=True)
    last_verified_at = Column(DateTime(timezone=True), nullable=True)

    # Relative arrival order across every upload
    upload_sequence = Column(BigInteger().with_variant(Integer, "sqlite"), nullable=True)

    __table_args__ = (
        Index("idx_leads_upload_sequence_created", "upload_sequence", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Lead(lead_id='{self.lead_id}', email='{self.email}', seq={self.upload_sequence})>"


class LeadSequence(Base):
    """Named monotonically increasing counter, advanced atomically."""
    __tablename__ = "lead_sequences"

    name = Column(String(50), primary_key=True)
    value = Column(BigInteger().with_variant(Integer, "sqlite"), nullable=False, default=0)
