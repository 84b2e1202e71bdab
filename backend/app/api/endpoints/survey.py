"""
Public survey intake endpoint. No authentication.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.survey import SurveyPayload, SubmissionResponse
from app.services.survey_writer import SurveyWriter

router = APIRouter()


@router.post("/submit-survey", response_model=SubmissionResponse)
async def submit_survey(
    payload: SurveyPayload,
    db: AsyncSession = Depends(get_db)
):
    """Store one survey response (submission plus its rate lines) atomically"""
    submission_id = await SurveyWriter(db).submit(payload)
    return {"success": True, "submissionId": submission_id}
