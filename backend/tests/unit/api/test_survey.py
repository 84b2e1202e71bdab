"""
API Tests for survey submission
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from app.models.survey import SurveySubmission, SurveyRate


class TestSubmitSurvey:
    """Test POST /api/submit-survey"""

    @pytest.mark.asyncio
    async def test_submit_success(self, client: AsyncClient, db_session, survey_payload):
        response = await client.post("/api/submit-survey", json=survey_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert isinstance(data["submissionId"], int)

        submission = await db_session.get(SurveySubmission, data["submissionId"])
        assert submission.company_name == "Acme Roofing"
        rate_count = await db_session.scalar(
            select(func.count()).select_from(SurveyRate)
            .where(SurveyRate.submission_id == data["submissionId"])
        )
        assert rate_count == 3

    @pytest.mark.asyncio
    async def test_submit_needs_no_token(self, client: AsyncClient, survey_payload):
        response = await client.post(
            "/api/submit-survey",
            json=survey_payload,
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_submit_company_only(self, client: AsyncClient):
        response = await client.post(
            "/api/submit-survey",
            json={"company": {"companyName": "Solo Roofing", "region": "West Coast"}},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_free_form_blobs_accepted(self, client: AsyncClient, db_session):
        body = {
            "company": {"companyName": "Acme Roofing", "region": "Auckland"},
            "overtime": {"notes": 5},
            "mileage": {"perKmRate": {"x": 1}},
        }

        response = await client.post("/api/submit-survey", json=body)

        assert response.status_code == 200
        submission = await db_session.get(SurveySubmission, response.json()["submissionId"])
        assert submission.overtime == {"notes": 5}
        assert submission.mileage == {"perKmRate": {"x": 1}}

    @pytest.mark.asyncio
    async def test_missing_company(self, client: AsyncClient):
        response = await client.post("/api/submit-survey", json={"rates": {}})

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert "error" in data

    @pytest.mark.asyncio
    async def test_blank_company_name(self, client: AsyncClient, db_session):
        response = await client.post(
            "/api/submit-survey",
            json={"company": {"companyName": "", "region": "Auckland"}},
        )

        assert response.status_code == 400
        count = await db_session.scalar(select(func.count()).select_from(SurveySubmission))
        assert count == 0

    @pytest.mark.asyncio
    async def test_unknown_region(self, client: AsyncClient):
        response = await client.post(
            "/api/submit-survey",
            json={"company": {"companyName": "Acme Roofing", "region": "Mars"}},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_json(self, client: AsyncClient):
        response = await client.post(
            "/api/submit-survey",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_not_allowed(self, client: AsyncClient):
        response = await client.get("/api/submit-survey")

        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed"}

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, client: AsyncClient, db_session, survey_payload, monkeypatch):
        def broken_rate(**kwargs):
            raise RuntimeError("connection lost")

        monkeypatch.setattr("app.services.survey_writer.SurveyRate", broken_rate)

        response = await client.post("/api/submit-survey", json=survey_payload)

        assert response.status_code == 500
        assert response.json() == {"error": "Database insert failed", "code": "WRITE_FAILED"}
        count = await db_session.scalar(select(func.count()).select_from(SurveySubmission))
        assert count == 0
