"""
Admin export endpoint: CSV download, or row counts with ?stats=true.
"""
from fastapi import APIRouter, Depends, Query
from typing import Optional
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.logging_config import logger
from app.modules.auth.dependencies import require_staff
from app.schemas.admin import ExportStats
from app.services.survey_export import SurveyExportService, iter_csv

router = APIRouter()


@router.get(
    "",
    responses={
        200: {
            "content": {"text/csv": {}},
            "description": "CSV attachment, or ExportStats JSON when stats=true",
        }
    },
)
async def export_survey(
    stats: Optional[str] = Query(None, description="\"true\" returns row counts instead of the CSV"),
    staff_email: str = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Export all submissions joined to their rate lines"""
    service = SurveyExportService(db)

    if stats == "true":
        counts = await service.stats()
        return ExportStats(
            total_submissions=counts["total_submissions"],
            total_rates=counts["total_rates"],
        ).model_dump(by_alias=True)

    rows = await service.fetch_rows()
    logger.info(f"[Export] {staff_email} exported {len(rows)} rows")

    return StreamingResponse(
        iter_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{settings.EXPORT_FILENAME}"'}
    )
