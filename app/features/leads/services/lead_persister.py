from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.leads.exceptions import BatchInsertError
from app.features.leads.models.lead_model import Lead
from app.platform.db.errors import is_unique_violation
from app.platform.logger import get_logger

logger = get_logger("lead_upload")


@dataclass
class PersistResult:
    inserted: int = 0
    errors: List[str] = field(default_factory=list)


async def insert_ordered_batch(db: AsyncSession, records: List[Dict[str, Any]]) -> int:
    """
    Insert records in order as one batch.

    The batch runs inside a savepoint, so a failure leaves nothing of it
    behind; BatchInsertError then reports a persisted prefix of 0.
    """
    try:
        async with db.begin_nested():
            await db.execute(insert(Lead), records)
    except SQLAlchemyError as e:
        raise BatchInsertError(inserted=0, unique_violation=is_unique_violation(e), cause=e) from e
    return len(records)


async def insert_one(db: AsyncSession, record: Dict[str, Any]) -> None:
    async with db.begin_nested():
        db.add(Lead(**record))


async def persist_leads(db: AsyncSession, records: List[Dict[str, Any]]) -> PersistResult:
    """
    Write sequenced lead records, keeping their order.

    Tries one ordered batch first. If the batch hits a uniqueness conflict,
    every row from the persisted prefix onward is inserted on its own and
    classified as a duplicate or another error, without stopping. Any other
    batch failure is reported once and nothing is retried.
    """
    result = PersistResult()
    if not records:
        return result

    try:
        result.inserted = await insert_ordered_batch(db, records)
    except BatchInsertError as batch_error:
        result.inserted = batch_error.inserted

        if not batch_error.unique_violation:
            logger.error(f"Bulk insert failed: {batch_error.cause}")
            result.errors.append(f"Bulk insert error: {batch_error.cause}")
        else:
            logger.warning(
                f"Bulk insert hit a duplicate; inserting {len(records) - batch_error.inserted} rows one by one"
            )
            for record in records[batch_error.inserted:]:
                try:
                    await insert_one(db, record)
                    result.inserted += 1
                except SQLAlchemyError as e:
                    if is_unique_violation(e):
                        result.errors.append(f"Duplicate leadId: {record['lead_id']}")
                    else:
                        result.errors.append(f"Error inserting {record['lead_id']}: {e}")

    await db.commit()
    return result
