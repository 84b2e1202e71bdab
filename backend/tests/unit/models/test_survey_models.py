"""
Unit Tests for the survey tables
"""
import pytest
from sqlalchemy.exc import IntegrityError

from app.models.survey import SurveySubmission


class TestSurveySubmissionColumns:
    """The store enforces the fields the form requires"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["company_name", "region"])
    async def test_required_columns(self, db_session, missing):
        values = {"company_name": "Acme Roofing", "region": "Auckland"}
        values[missing] = None
        db_session.add(SurveySubmission(**values))

        with pytest.raises(IntegrityError):
            await db_session.flush()

        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_optional_columns_default_to_null(self, db_session):
        submission = SurveySubmission(company_name="Acme Roofing", region="Auckland")
        db_session.add(submission)
        await db_session.flush()

        assert submission.id is not None
        assert submission.total_staff is None
        assert submission.overtime is None
        assert submission.is_lbp is False
