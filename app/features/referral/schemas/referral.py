from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr


class ReferrerInfo(BaseModel):
    name: str
    email: EmailStr


class ReferralValidationResponse(BaseModel):
    """Result of checking a referral code before sign-up."""
    valid: bool
    referrer: Optional[ReferrerInfo] = None

    class Config:
        json_schema_extra = {
            "example": {
                "valid": True,
                "referrer": {"name": "Ada Lovelace", "email": "ada@example.com"}
            }
        }


class ReferredUser(BaseModel):
    id: str
    name: str
    email: EmailStr
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReferralItem(BaseModel):
    user: Optional[ReferredUser]
    joined_at: datetime
    is_active: bool
    subscription_status: str


class ReferralStats(BaseModel):
    total_referrals: int
    active_referrals: int
    total_earnings: Decimal


class MyReferralsResponse(BaseModel):
    referral_code: Optional[str]
    stats: ReferralStats
    referrals: List[ReferralItem]


class ReferralStatsResponse(ReferralStats):
    referral_code: Optional[str]

    class Config:
        json_schema_extra = {
            "example": {
                "referral_code": "9F2C41A7B0DE",
                "total_referrals": 4,
                "active_referrals": 1,
                "total_earnings": "0.00"
            }
        }
