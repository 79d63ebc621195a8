from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.leads.models.lead_model import Lead, LeadSequence
from app.platform.logger import get_logger

logger = get_logger("lead_upload")

UPLOAD_SEQUENCE = "lead_upload"


async def _seed_counter(db: AsyncSession, name: str) -> None:
    """Create the counter row, starting from the highest sequence already stored."""
    current_max = await db.scalar(select(func.max(Lead.upload_sequence)))
    try:
        async with db.begin_nested():
            db.add(LeadSequence(name=name, value=current_max or 0))
    except IntegrityError:
        # Another request seeded it first
        pass
    else:
        logger.info(f"Seeded sequence '{name}' at {current_max or 0}")


async def reserve_sequence_block(db: AsyncSession, count: int, name: str = UPLOAD_SEQUENCE) -> int:
    """
    Reserve `count` consecutive sequence values and return the value just
    before the block; the caller assigns base + 1 .. base + count.

    The increment is a single UPDATE ... RETURNING, so two uploads running at
    the same time always receive disjoint blocks.
    """
    if count < 0:
        raise ValueError("count must not be negative")

    stmt = (
        update(LeadSequence)
        .where(LeadSequence.name == name)
        .values(value=LeadSequence.value + count)
        .returning(LeadSequence.value)
    )

    new_value = (await db.execute(stmt)).scalar_one_or_none()
    if new_value is None:
        await _seed_counter(db, name)
        new_value = (await db.execute(stmt)).scalar_one()

    return new_value - count
