"""
Survey Export - admin statistics and the flattened CSV download

The CSV is one row per rate line, joined to its submission. Submissions with
no rate lines still produce one row with the rate columns empty. Ordering is
submission id, role key, band key so repeated exports diff cleanly.
"""

import csv
import io
import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ExportError
from app.core.logging_config import logger
from app.models.survey import SurveySubmission, SurveyRate


EXPORT_COLUMNS: Sequence[str] = (
    "submission_id",
    "company_name",
    "ranz_member_number",
    "region",
    "total_staff",
    "is_lbp",
    "overtime",
    "mileage",
    "other_benefits",
    "created_at",
    "role_key",
    "band_key",
    "hourly_rate",
    "charge_out_rate",
)

BLOB_COLUMNS = frozenset({"overtime", "mileage"})


def format_value(column: str, value: Any) -> str:
    """Render one cell before CSV escaping. NULL is an empty field."""
    if value is None:
        return ""
    if column in BLOB_COLUMNS:
        return json.dumps(value, separators=(",", ":"), sort_keys=True, default=str)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return str(value)


def iter_csv(rows: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """
    Yield the export one line at a time, header first.

    Fields containing a comma, double quote or line break are quoted with
    inner quotes doubled (csv.QUOTE_MINIMAL).
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")

    def flush() -> str:
        line = buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)
        return line

    writer.writerow(EXPORT_COLUMNS)
    yield flush()

    for row in rows:
        writer.writerow([format_value(column, row.get(column)) for column in EXPORT_COLUMNS])
        yield flush()


def render_csv(rows: Iterable[Dict[str, Any]]) -> str:
    """Whole export as one string"""
    return "".join(iter_csv(rows))


class SurveyExportService:
    """Read side of the survey store, used by the admin endpoints"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def stats(self) -> Dict[str, int]:
        """Submission and rate line counts"""
        try:
            total_submissions = await self.db.scalar(
                select(func.count()).select_from(SurveySubmission)
            )
            total_rates = await self.db.scalar(
                select(func.count()).select_from(SurveyRate)
            )
        except Exception as e:
            logger.log_error_with_context(e, context="export stats")
            raise ExportError() from e

        return {
            "total_submissions": int(total_submissions or 0),
            "total_rates": int(total_rates or 0),
        }

    async def fetch_rows(self) -> List[Dict[str, Any]]:
        """Submissions left-joined to their rate lines, in export order"""
        query = (
            select(
                SurveySubmission.id.label("submission_id"),
                SurveySubmission.company_name,
                SurveySubmission.ranz_member_number,
                SurveySubmission.region,
                SurveySubmission.total_staff,
                SurveySubmission.is_lbp,
                SurveySubmission.overtime,
                SurveySubmission.mileage,
                SurveySubmission.other_benefits,
                SurveySubmission.created_at,
                SurveyRate.role_key,
                SurveyRate.band_key,
                SurveyRate.hourly_rate,
                SurveyRate.charge_out_rate,
            )
            .outerjoin(SurveyRate, SurveyRate.submission_id == SurveySubmission.id)
            .order_by(SurveySubmission.id, SurveyRate.role_key, SurveyRate.band_key)
        )

        try:
            result = await self.db.execute(query)
            rows = [dict(row) for row in result.mappings().all()]
        except Exception as e:
            logger.log_error_with_context(e, context="csv export")
            raise ExportError() from e

        logger.info(f"[Export] Fetched {len(rows)} export rows")
        return rows
