from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.features.leads.models.email_feedback import EmailType, RecipientStatus


class SendEmailRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, description="Body; may use {{ name }}, {{ city }} etc.")
    email_type: EmailType
    category: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    lead_ids: List[str] = Field(default_factory=list, description="Store ids for email_type=selected")

    @model_validator(mode="after")
    def check_criteria(self):
        self.subject = self.subject.strip()
        self.message = self.message.strip()
        if not self.subject or not self.message:
            raise ValueError("subject and message must not be blank")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "subject": "Quick question about your shop",
                "message": "Hi {{ name }}, we help businesses in {{ city }} get more bookings.",
                "email_type": "city",
                "city": "Lagos"
            }
        }


class RecipientOut(BaseModel):
    lead_id: Optional[str]
    email: str
    name: Optional[str]
    status: RecipientStatus
    error: Optional[str] = None

    class Config:
        from_attributes = True


class EmailFeedbackOut(BaseModel):
    id: str
    subject: str
    message: str
    email_type: EmailType
    filter_category: Optional[str]
    filter_city: Optional[str]
    filter_country: Optional[str]
    total_recipients: int
    success_count: int
    failed_count: int
    sent_at: datetime
    recipients: List[RecipientOut]

    class Config:
        from_attributes = True
