import math
from typing import List, Tuple

from fastapi import HTTPException, status
from fastapi.concurrency import run_in_threadpool
from jinja2 import TemplateError
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.leads.models.email_feedback import (
    EmailFeedback,
    EmailFeedbackRecipient,
    EmailType,
    RecipientStatus,
)
from app.features.leads.models.lead_model import Lead
from app.features.leads.schemas.email_feedback import SendEmailRequest
from app.features.leads.schemas.lead_schema import Pagination
from app.platform.logger import get_logger
from app.platform.services.email import EmailDeliveryError, render_message, send_email

logger = get_logger("email_campaign")

# email_type -> (request attribute, Lead column) for the single-field filters
FIELD_FILTERS = {
    EmailType.category: ("category", Lead.category),
    EmailType.city: ("city", Lead.city),
    EmailType.country: ("country", Lead.country),
}


class EmailCampaignService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def select_recipients(self, request: SendEmailRequest) -> List[Lead]:
        query = select(Lead).order_by(desc(Lead.upload_sequence).nulls_last())

        if request.email_type in FIELD_FILTERS:
            attr, column = FIELD_FILTERS[request.email_type]
            value = (getattr(request, attr) or "").strip()
            if not value:
                raise HTTPException(
                    status.HTTP_400_BAD_REQUEST, f"'{attr}' is required for {request.email_type.value} emails"
                )
            query = query.where(func.lower(column) == value.lower())
        elif request.email_type == EmailType.selected:
            if not request.lead_ids:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, "'lead_ids' is required for selected emails")
            query = query.where(Lead.id.in_(request.lead_ids))

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def send(self, sender_id: str, request: SendEmailRequest) -> EmailFeedback:
        """
        Send one email per matching lead and record the outcome of each.

        A failed recipient does not stop the rest. The feedback row is
        written once, after the last send.
        """
        leads = await self.select_recipients(request)
        if not leads:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "No leads match the selected criteria")

        recipients = []
        for lead in leads:
            recipient = EmailFeedbackRecipient(lead_id=lead.id, email=lead.email, name=lead.name)
            try:
                body = render_message(
                    request.message,
                    {
                        "name": lead.name,
                        "email": lead.email,
                        "category": lead.category or "",
                        "city": lead.city or "",
                        "country": lead.country or "",
                    },
                )
                await run_in_threadpool(send_email, lead.email, request.subject, body)
                recipient.status = RecipientStatus.sent
            except (EmailDeliveryError, TemplateError) as e:
                logger.error(f"Email to {lead.email} failed: {e}")
                recipient.status = RecipientStatus.failed
                recipient.error = str(e)
            recipients.append(recipient)

        success = sum(1 for r in recipients if r.status == RecipientStatus.sent)
        feedback = EmailFeedback(
            user_id=sender_id,
            subject=request.subject,
            message=request.message,
            email_type=request.email_type,
            filter_category=request.category if request.email_type == EmailType.category else None,
            filter_city=request.city if request.email_type == EmailType.city else None,
            filter_country=request.country if request.email_type == EmailType.country else None,
            total_recipients=len(recipients),
            success_count=success,
            failed_count=len(recipients) - success,
            recipients=recipients,
        )
        self.db.add(feedback)
        await self.db.commit()
        await self.db.refresh(feedback, attribute_names=["recipients"])

        logger.info(
            f"Bulk email '{request.subject}' ({request.email_type.value}): "
            f"{feedback.success_count} sent, {feedback.failed_count} failed"
        )
        return feedback

    async def list_feedback(
        self, sender_id: str, page: int = 1, limit: int = 20
    ) -> Tuple[List[EmailFeedback], Pagination]:
        offset = (page - 1) * limit
        total = await self.db.scalar(
            select(func.count(EmailFeedback.id)).where(EmailFeedback.user_id == sender_id)
        ) or 0

        result = await self.db.execute(
            select(EmailFeedback)
            .where(EmailFeedback.user_id == sender_id)
            .order_by(desc(EmailFeedback.sent_at))
            .offset(offset)
            .limit(limit)
        )
        items = list(result.scalars().all())

        return items, Pagination(
            current_page=page,
            total_pages=math.ceil(total / limit) if total else 0,
            total_items=total,
            has_next=offset + len(items) < total,
            has_prev=page > 1,
        )
