from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class LeadBase(BaseModel):
    lead_id: str = Field(..., min_length=1, max_length=100, description="Spreadsheet lead identifier")
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., description="Lead email")
    phone: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    address_street: Optional[str] = None
    linkedin: Optional[str] = None
    facebook_link: Optional[str] = None
    website_link: Optional[str] = None
    google_map_link: Optional[str] = None
    instagram: Optional[str] = None
    last_verified_at: Optional[datetime] = None

    @field_validator("lead_id", "name")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class LeadCreate(LeadBase):
    pass


class LeadUpdate(LeadBase):
    """Full replacement of a lead's editable fields."""


class LeadOut(LeadBase):
    id: str
    email: str
    upload_sequence: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool


class LeadListResponse(BaseModel):
    leads: List[LeadOut]
    pagination: Pagination


class UploadDetails(BaseModel):
    skipped_details: List[str]
    error_details: List[str]


class UploadSummary(BaseModel):
    message: str
    uploaded: int
    skipped: int
    errors: int
    total_processed: int
    details: UploadDetails

    class Config:
        json_schema_extra = {
            "example": {
                "message": "Upload completed: 1 leads inserted",
                "uploaded": 1,
                "skipped": 1,
                "errors": 1,
                "total_processed": 3,
                "details": {
                    "skipped_details": ["Row 4: Lead ID 1 already exists"],
                    "error_details": ["Row 3: Invalid email format: not-an-email"]
                }
            }
        }
