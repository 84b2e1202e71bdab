"""
API Tests for the admin export
Tests for: authorization gate, stats, CSV download
"""
import csv
import io
import pytest
from datetime import timedelta
from httpx import AsyncClient

from app.core.security import TokenService, create_access_token


class TestExportAuthorization:
    """Every rejected request must fail before touching the store"""

    @pytest.mark.asyncio
    async def test_no_token(self, client: AsyncClient, query_log):
        response = await client.get("/api/admin/export")

        assert response.status_code == 401
        assert response.json()["error"] == "Authorization required"
        assert query_log == []

    @pytest.mark.asyncio
    async def test_garbage_token(self, client: AsyncClient, query_log):
        response = await client.get(
            "/api/admin/export",
            headers={"Authorization": "Bearer not.a.token"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"
        assert query_log == []

    @pytest.mark.asyncio
    async def test_expired_token(self, client: AsyncClient, staff_user, query_log):
        token = create_access_token(staff_user.email, False, expires_delta=timedelta(seconds=-1))

        response = await client.get(
            "/api/admin/export",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert query_log == []

    @pytest.mark.asyncio
    async def test_foreign_signature(self, client: AsyncClient, staff_user, query_log):
        token = TokenService(secret_key="another-deployment-secret-key").issue(staff_user.email, False)

        response = await client.get(
            "/api/admin/export",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert query_log == []

    @pytest.mark.asyncio
    async def test_forced_change_token(self, client: AsyncClient, forced_change_headers, query_log):
        response = await client.get("/api/admin/export", headers=forced_change_headers)

        assert response.status_code == 401
        assert response.json()["error"] == "Password change required"
        assert query_log == []

    @pytest.mark.asyncio
    async def test_stats_also_gated(self, client: AsyncClient, forced_change_headers, query_log):
        response = await client.get("/api/admin/export?stats=true", headers=forced_change_headers)

        assert response.status_code == 401
        assert query_log == []


class TestExportDownload:
    """Test GET /api/admin/export"""

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, auth_headers, survey_payload):
        await client.post("/api/submit-survey", json=survey_payload)

        response = await client.get("/api/admin/export?stats=true", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"totalSubmissions": 1, "totalRates": 3}

    @pytest.mark.asyncio
    async def test_stats_empty_store(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/admin/export?stats=true", headers=auth_headers)

        assert response.json() == {"totalSubmissions": 0, "totalRates": 0}

    @pytest.mark.asyncio
    async def test_csv_download(self, client: AsyncClient, auth_headers, survey_payload):
        await client.post("/api/submit-survey", json=survey_payload)

        response = await client.get("/api/admin/export", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == 'attachment; filename="ranz-survey-export.csv"'
        assert response.headers["cache-control"] == "no-store"

        rows = list(csv.DictReader(io.StringIO(response.text)))
        assert [(r["role_key"], r["band_key"]) for r in rows] == [
            ("foreman", "3_years"),
            ("foreman", "8_plus"),
            ("labourer", "3_years"),
        ]
        assert rows[0]["company_name"] == "Acme Roofing"

    @pytest.mark.asyncio
    async def test_stats_other_value_returns_csv(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/admin/export?stats=false", headers=auth_headers)

        assert response.headers["content-type"].startswith("text/csv")

    @pytest.mark.asyncio
    async def test_csv_empty_store_has_header(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/admin/export", headers=auth_headers)

        assert response.text.splitlines() == [
            "submission_id,company_name,ranz_member_number,region,total_staff,is_lbp,"
            "overtime,mileage,other_benefits,created_at,role_key,band_key,hourly_rate,charge_out_rate"
        ]

    @pytest.mark.asyncio
    async def test_repeated_downloads_identical(self, client: AsyncClient, auth_headers, survey_payload):
        await client.post("/api/submit-survey", json=survey_payload)

        first = await client.get("/api/admin/export", headers=auth_headers)
        second = await client.get("/api/admin/export", headers=auth_headers)

        assert first.content == second.content
