import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.auth.utils.auth import get_current_user
from app.features.referral.schemas.referral import (
    MyReferralsResponse,
    ReferralItem,
    ReferralStatsResponse,
    ReferralValidationResponse,
    ReferredUser,
    ReferrerInfo,
)
from app.features.referral.services import referral_service
from app.platform.db.session import get_db
from app.platform.response import api_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/referrals", tags=["Referrals"])


@router.get("/validate/{code}")
async def validate_referral(code: str, db: AsyncSession = Depends(get_db)):
    """
    Public check used by the sign-up form.

    A code is valid only while its owner's subscription has not expired.
    """
    referrer = await referral_service.validate_referral_code(db, code)

    if not referrer:
        return api_response(
            data=ReferralValidationResponse(valid=False),
            message="Invalid or expired referral code",
            status_code=status.HTTP_404_NOT_FOUND,
        )

    return api_response(
        data=ReferralValidationResponse(
            valid=True,
            referrer=ReferrerInfo(name=referrer.name, email=referrer.email),
        ),
        message="Referral code is valid",
    )


@router.get("/my-referrals")
async def get_my_referrals(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await referral_service.get_user_with_referrals(db, current_user.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    referrals = [
        ReferralItem(
            user=ReferredUser.model_validate(entry.referred_user) if entry.referred_user else None,
            joined_at=entry.joined_at,
            is_active=entry.is_active,
            subscription_status=entry.subscription_status,
        )
        for entry in user.referrals
    ]

    return api_response(
        data=MyReferralsResponse(
            referral_code=user.referral_code,
            stats=referral_service.build_stats(user),
            referrals=referrals,
        ),
        message="Referrals retrieved successfully",
    )


@router.get("/stats")
async def get_referral_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await db.get(User, current_user.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return api_response(
        data=ReferralStatsResponse(
            referral_code=user.referral_code,
            **referral_service.build_stats(user),
        ),
        message="Referral statistics retrieved successfully",
    )
