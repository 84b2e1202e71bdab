"""
Survey Writer - persists one form submission and its rate lines atomically

Write path:
1. Insert the survey_submissions header row
2. Flush to obtain the generated id
3. Insert one survey_rates row per role/band pair that has at least one rate
4. Commit, or roll back everything and raise SubmissionWriteError
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import SubmissionWriteError
from app.core.logging_config import logger
from app.models.survey import SurveySubmission, SurveyRate
from app.schemas.survey import SurveyPayload, RateEntry


# Column limits: survey_rates Numeric(10, 2) and a 32-bit INTEGER head count
MAX_RATE = Decimal("99999999.99")
MAX_STAFF_COUNT = 2 ** 31 - 1


def parse_rate(value: Any) -> Optional[Decimal]:
    """
    Parse a rate typed into the form.

    Absent, blank, unparsable, non-finite, negative or out of range values
    become None.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        rate = Decimal(text)
    except InvalidOperation:
        return None
    if not rate.is_finite() or rate < 0:
        return None
    if rate > MAX_RATE:
        return None
    return rate


def parse_staff_count(value: Any) -> Optional[int]:
    """Lenient head count: anything that is not a whole number in 0..MAX_STAFF_COUNT is None"""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite() or number < 0 or number != number.to_integral_value():
        return None
    if number > MAX_STAFF_COUNT:
        return None
    return int(number)


def build_rate_lines(rates: Optional[Dict[str, Dict[str, RateEntry]]]) -> List[Dict[str, Any]]:
    """Flatten role -> band -> entry into row values, dropping pairs with no rate"""
    lines: List[Dict[str, Any]] = []
    for role_key, bands in (rates or {}).items():
        for band_key, entry in bands.items():
            hourly_rate = parse_rate(entry.hourly_rate)
            charge_out_rate = parse_rate(entry.charge_out_rate)
            if hourly_rate is None and charge_out_rate is None:
                continue
            lines.append({
                "role_key": role_key,
                "band_key": band_key,
                "hourly_rate": hourly_rate,
                "charge_out_rate": charge_out_rate,
            })
    return lines


class SurveyWriter:
    """Transactional writer for survey submissions"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def submit(self, payload: SurveyPayload) -> int:
        """
        Store a submission and its rate lines in one transaction.

        Returns:
            The generated submission id.

        Raises:
            SubmissionWriteError: anything failed; no rows were kept.
        """
        company = payload.company
        lines = build_rate_lines(payload.rates)

        try:
            submission = SurveySubmission(
                company_name=company.company_name,
                ranz_member_number=company.ranz_member_number,
                region=company.region,
                total_staff=parse_staff_count(company.total_staff),
                is_lbp=bool(company.is_lbp),
                overtime=payload.overtime,
                mileage=payload.mileage,
                other_benefits=payload.other_benefits,
            )
            self.db.add(submission)
            await self.db.flush()

            submission_id = submission.id

            for line in lines:
                self.db.add(SurveyRate(submission_id=submission_id, **line))

            await self.db.commit()

        except Exception as e:
            await self.db.rollback()
            logger.log_error_with_context(
                e,
                context="survey submission",
                company_name=company.company_name,
                rate_lines=len(lines),
            )
            raise SubmissionWriteError() from e

        logger.log_submission(submission_id, len(lines), region=company.region)
        return submission_id

