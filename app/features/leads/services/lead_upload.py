from typing import List, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.leads.exceptions import DuplicateError, RowValidationError
from app.features.leads.models.lead_model import Lead
from app.features.leads.schemas.lead_schema import UploadDetails, UploadSummary
from app.features.leads.services.lead_persister import persist_leads
from app.features.leads.services.row_normalizer import LeadRow, validate_row
from app.features.leads.services.sequence import reserve_sequence_block
from app.features.leads.services.spreadsheet_parser import read_sheet_rows
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger("lead_upload")


def build_summary(
    uploaded: int,
    skipped: List[str],
    errors: List[str],
    total_processed: int,
    limit: Optional[int] = None,
) -> UploadSummary:
    limit = settings.LEAD_UPLOAD_REPORT_LIMIT if limit is None else limit
    return UploadSummary(
        message=f"Upload completed: {uploaded} leads inserted",
        uploaded=uploaded,
        skipped=len(skipped),
        errors=len(errors),
        total_processed=total_processed,
        details=UploadDetails(
            skipped_details=skipped[:limit],
            error_details=errors[:limit],
        ),
    )


class LeadUploadService:
    """Spreadsheet ingestion: parse, validate, dedupe, sequence, persist, report."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def existing_lead_ids(self) -> Set[str]:
        result = await self.db.execute(select(Lead.lead_id))
        return set(result.scalars().all())

    async def ingest(self, content: bytes) -> UploadSummary:
        """
        Raises ParseError before touching the store if the workbook is unreadable.
        Every row-level problem ends up in the summary instead.
        """
        rows = read_sheet_rows(content)

        known_ids = await self.existing_lead_ids()
        accepted: List[LeadRow] = []
        skipped: List[str] = []
        errors: List[str] = []

        for sheet_row in rows:
            try:
                lead_row = validate_row(sheet_row.values, sheet_row.row_number)
            except RowValidationError as e:
                errors.append(str(e))
                continue

            if lead_row is None:
                continue

            if lead_row.lead_id in known_ids:
                skipped.append(str(DuplicateError(lead_row.row_number, lead_row.lead_id)))
                continue

            known_ids.add(lead_row.lead_id)
            accepted.append(lead_row)

        inserted = 0
        if accepted:
            base = await reserve_sequence_block(self.db, len(accepted))
            logger.info(f"Reserved upload sequence {base + 1}..{base + len(accepted)}")

            records = [row.to_record(base + offset) for offset, row in enumerate(accepted, start=1)]
            persisted = await persist_leads(self.db, records)
            inserted = persisted.inserted
            errors.extend(persisted.errors)

        summary = build_summary(inserted, skipped, errors, total_processed=len(rows))
        logger.info(
            f"Lead upload finished: {summary.uploaded} inserted, "
            f"{summary.skipped} skipped, {summary.errors} errors, {summary.total_processed} rows"
        )
        return summary
