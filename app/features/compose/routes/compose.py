from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.compose.schemas.compose import ComposeRequest
from app.features.compose.services.compose_service import ComposeError, ComposeService
from app.platform.db.session import get_db
from app.platform.logger import get_logger

logger = get_logger("compose_routes")

router = APIRouter(prefix="/compose", tags=["Compose"])


@router.post("")
async def compose_message(payload: ComposeRequest, db: AsyncSession = Depends(get_db)):
    """Generate a short outreach message for the given channel, tone and goal."""
    try:
        text = await ComposeService(db).compose(payload)
    except ComposeError as e:
        logger.error(f"Gemini error: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": "AI request failed"},
        )

    return {"ok": True, "text": text}
