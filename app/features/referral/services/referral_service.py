import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from app.features.auth.models.user import User
from app.features.referral.models.referral import ReferralEntry

logger = logging.getLogger(__name__)

REFERRAL_CODE_BYTES = 6  # 12 hex characters


def generate_referral_code() -> str:
    """Generate a unique-enough 12-character upper-case hex referral code."""
    return secrets.token_hex(REFERRAL_CODE_BYTES).upper()


async def validate_referral_code(db: AsyncSession, referral_code: str) -> Optional[User]:
    """
    Return the referrer owning the code, but only while their subscription
    is still running. Unknown codes and expired subscriptions both give None.
    """
    if not referral_code:
        return None

    query = select(User).where(
        User.referral_code == referral_code.strip().upper(),
        User.subscription_end_date.isnot(None),
        User.subscription_end_date >= datetime.now(timezone.utc),
    )
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def update_referral_stats(db: AsyncSession, referrer_id: str) -> Optional[User]:
    """
    Recompute the referrer's derived counters from their referral entries.

    Does not commit; the caller owns the transaction.
    """
    referrer = await db.get(User, referrer_id)
    if referrer is None:
        return None

    total = await db.scalar(
        select(func.count(ReferralEntry.id)).where(ReferralEntry.referrer_id == referrer_id)
    )
    active = await db.scalar(
        select(func.count(ReferralEntry.id)).where(
            ReferralEntry.referrer_id == referrer_id,
            ReferralEntry.is_active.is_(True),
        )
    )

    referrer.total_referrals = total or 0
    referrer.active_referrals = active or 0
    await db.flush()
    return referrer


async def process_referral_reward(
    db: AsyncSession, referred_user_id: str, referrer_id: str
) -> bool:
    """
    Activate a referral after the referred user's subscription payment succeeds.

    Returns False when the referrer has no entry for that user.
    """
    result = await db.execute(
        update(ReferralEntry)
        .where(
            ReferralEntry.referrer_id == referrer_id,
            ReferralEntry.referred_user_id == referred_user_id,
        )
        .values(is_active=True, subscription_status="active")
        .execution_options(synchronize_session="fetch")
    )

    if result.rowcount == 0:
        logger.warning(f"No referral entry for {referred_user_id} under referrer {referrer_id}")
        return False

    await update_referral_stats(db, referrer_id)
    await db.commit()

    logger.info(f"Referral processed: {referred_user_id} -> {referrer_id}")
    return True


async def get_user_with_referrals(db: AsyncSession, user_id: str) -> Optional[User]:
    query = (
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.referrals).joinedload(ReferralEntry.referred_user))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    return result.scalar_one_or_none()


def build_stats(user: User) -> dict:
    return {
        "total_referrals": user.total_referrals or 0,
        "active_referrals": user.active_referrals or 0,
        "total_earnings": user.total_earnings or 0,
    }
