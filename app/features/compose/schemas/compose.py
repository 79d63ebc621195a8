from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ComposeRequest(BaseModel):
    channel: str = Field(..., min_length=1, max_length=50, description="e.g. email, whatsapp, linkedin")
    industry: str = Field(..., min_length=1)
    tone: str = Field(..., min_length=1)
    goal: str = Field(..., min_length=1)
    details: Optional[Dict[str, Any]] = None
    language: Optional[str] = "English"

    class Config:
        json_schema_extra = {
            "example": {
                "channel": "whatsapp",
                "industry": "Dental clinics",
                "tone": "Friendly",
                "goal": "Book a demo call",
                "details": {"offer": "Free website audit"},
                "language": "English"
            }
        }
