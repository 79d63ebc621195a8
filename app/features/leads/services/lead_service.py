import math
from typing import Tuple

from fastapi import HTTPException, status
from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.leads.models.lead_model import Lead
from app.features.leads.schemas.lead_schema import LeadCreate, LeadUpdate, Pagination
from app.features.leads.services.sequence import reserve_sequence_block
from app.platform.db.errors import is_unique_violation
from app.platform.logger import get_logger

logger = get_logger("lead_service")


class LeadService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _lead_id_taken(self, lead_id: str, exclude_id: str | None = None) -> bool:
        query = select(Lead.id).where(Lead.lead_id == lead_id)
        if exclude_id:
            query = query.where(Lead.id != exclude_id)
        return (await self.db.execute(query)).first() is not None

    async def _commit_or_conflict(self, lead_id: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                raise HTTPException(status.HTTP_409_CONFLICT, f"Lead ID {lead_id} already exists")
            raise

    async def create_lead(self, payload: LeadCreate) -> Lead:
        if await self._lead_id_taken(payload.lead_id):
            raise HTTPException(status.HTTP_409_CONFLICT, f"Lead ID {payload.lead_id} already exists")

        base = await reserve_sequence_block(self.db, 1)
        lead = Lead(**payload.model_dump(), upload_sequence=base + 1)
        self.db.add(lead)
        await self._commit_or_conflict(payload.lead_id)
        await self.db.refresh(lead)

        logger.info(f"Created lead {lead.lead_id} with sequence {lead.upload_sequence}")
        return lead

    async def list_leads(self, page: int = 1, limit: int = 50) -> Tuple[list[Lead], Pagination]:
        """Newest upload first, then newest created first."""
        offset = (page - 1) * limit

        total = await self.db.scalar(select(func.count(Lead.id))) or 0

        query = (
            select(Lead)
            .order_by(desc(Lead.upload_sequence).nulls_last(), desc(Lead.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        leads = list(result.scalars().all())

        pagination = Pagination(
            current_page=page,
            total_pages=math.ceil(total / limit) if total else 0,
            total_items=total,
            has_next=offset + len(leads) < total,
            has_prev=page > 1,
        )
        return leads, pagination

    async def get_lead(self, lead_pk: str) -> Lead:
        lead = await self.db.get(Lead, lead_pk)
        if not lead:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Lead not found")
        return lead

    async def update_lead(self, lead_pk: str, payload: LeadUpdate) -> Lead:
        lead = await self.get_lead(lead_pk)

        if await self._lead_id_taken(payload.lead_id, exclude_id=lead.id):
            raise HTTPException(status.HTTP_409_CONFLICT, f"Lead ID {payload.lead_id} already exists")

        for field, value in payload.model_dump().items():
            setattr(lead, field, value)

        await self._commit_or_conflict(payload.lead_id)
        await self.db.refresh(lead)
        return lead

    async def delete_lead(self, lead_pk: str) -> None:
        lead = await self.get_lead(lead_pk)
        await self.db.delete(lead)
        await self.db.commit()
        logger.info(f"Deleted lead {lead.lead_id}")
