from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.auth.utils.auth import get_current_admin
from app.features.leads.exceptions import ParseError
from app.features.leads.schemas.email_feedback import EmailFeedbackOut, SendEmailRequest
from app.features.leads.schemas.lead_schema import (
    LeadCreate,
    LeadListResponse,
    LeadOut,
    LeadUpdate,
)
from app.features.leads.services.email_campaign import EmailCampaignService
from app.features.leads.services.lead_service import LeadService
from app.features.leads.services.lead_upload import LeadUploadService
from app.platform.config import settings
from app.platform.db.session import get_db
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger("lead_routes")

router = APIRouter(prefix="/admin", tags=["Admin - Leads"])

ALLOWED_EXTENSIONS = {".xlsx", ".xlsm"}


def validate_workbook_upload(file: UploadFile) -> None:
    if not file.filename:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Excel file is required")

    file_ext = Path(file.filename).suffix.lower()
    if file_ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )


@router.post("/leads/upload", summary="Upload leads from an Excel workbook")
async def upload_leads(
    file: UploadFile = File(..., description="Workbook whose first sheet has a header row"),
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Bulk-import leads from the first sheet of an .xlsx file.

    - Rows need an id (`id`, `leadId` or `Lead ID`), `name` and a valid `email`
    - Ids that already exist are skipped
    - New rows get the next upload sequence numbers in sheet order
    """
    validate_workbook_upload(file)

    content = await file.read()
    if not content:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Excel file is required")
    if len(content) > settings.LEAD_UPLOAD_MAX_BYTES:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            f"File too large. Maximum size is {settings.LEAD_UPLOAD_MAX_BYTES // (1024 * 1024)}MB",
        )

    logger.info(f"Admin {current_admin.email} uploading {file.filename} ({len(content)} bytes)")

    try:
        summary = await LeadUploadService(db).ingest(content)
    except ParseError as e:
        logger.warning(f"Rejected upload {file.filename}: {e}")
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))

    return api_response(data=summary, message=summary.message)


@router.post("/leads", status_code=status.HTTP_201_CREATED, summary="Create a single lead")
async def create_lead(
    payload: LeadCreate,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    lead = await LeadService(db).create_lead(payload)
    return api_response(
        data=LeadOut.model_validate(lead),
        message="Lead created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/leads", summary="List leads, most recently uploaded first")
async def get_leads(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(50, ge=1, le=500, description="Items per page"),
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    leads, pagination = await LeadService(db).list_leads(page=page, limit=limit)
    return api_response(
        data=LeadListResponse(
            leads=[LeadOut.model_validate(lead) for lead in leads],
            pagination=pagination,
        ),
        message="Leads retrieved successfully",
    )


@router.get("/get-lead/{lead_pk}")
async def get_lead(
    lead_pk: str,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    lead = await LeadService(db).get_lead(lead_pk)
    return api_response(data=LeadOut.model_validate(lead), message="Lead retrieved successfully")


@router.put("/update-leads/{lead_pk}")
async def update_lead(
    lead_pk: str,
    payload: LeadUpdate,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    lead = await LeadService(db).update_lead(lead_pk, payload)
    return api_response(data=LeadOut.model_validate(lead), message="Lead updated successfully")


@router.delete("/leads/{lead_pk}")
async def delete_lead(
    lead_pk: str,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    await LeadService(db).delete_lead(lead_pk)
    return api_response(message="Lead deleted successfully")


@router.post("/leads/send-email", summary="Email a group of leads")
async def send_lead_email(
    payload: SendEmailRequest,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    feedback = await EmailCampaignService(db).send(current_admin.id, payload)
    return api_response(
        data=EmailFeedbackOut.model_validate(feedback),
        message=f"Email sent to {feedback.success_count} of {feedback.total_recipients} leads",
    )


@router.get("/email-feedback", summary="History of bulk emails sent by the caller")
async def get_email_feedback(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    items, pagination = await EmailCampaignService(db).list_feedback(
        current_admin.id, page=page, limit=limit
    )
    return api_response(
        data={
            "feedback": [EmailFeedbackOut.model_validate(item) for item in items],
            "pagination": pagination,
        },
        message="Email feedback retrieved successfully",
    )
