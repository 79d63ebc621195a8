from sqlalchemy import Column, String, Text

from app.platform.db.base import BaseModel


class ComposeResponse(BaseModel):
    """Generated marketing copy together with the prompt that produced it."""
    __tablename__ = "compose_responses"

    channel = Column(String(50), nullable=False, index=True)
    prompt = Column(Text, nullable=False)
    ai_text = Column(Text, nullable=False)
