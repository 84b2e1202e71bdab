from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Numeric, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime

from app.core.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
SettingsBlob = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


class SurveySubmission(Base):
    """One survey response from one company. Never updated after commit."""
    __tablename__ = "survey_submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_name = Column(String(255), nullable=False)
    ranz_member_number = Column(String(100), nullable=True)
    region = Column(String(100), nullable=False, index=True)
    total_staff = Column(Integer, nullable=True)
    is_lbp = Column(Boolean, default=False, nullable=False)

    # Free-form settings kept as opaque blobs
    overtime = Column(SettingsBlob, nullable=True)  # hoursBeforeOvertime, overtimeMultiplier, notes
    mileage = Column(SettingsBlob, nullable=True)  # perKmRate, flatDailyRate, notes
    other_benefits = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SurveySubmission {self.id} {self.company_name}>"


class SurveyRate(Base):
    """One role/experience-band data point within a submission"""
    __tablename__ = "survey_rates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    submission_id = Column(
        Integer,
        ForeignKey("survey_submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role_key = Column(String(100), nullable=False)
    band_key = Column(String(100), nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    charge_out_rate = Column(Numeric(10, 2), nullable=True)

    def __repr__(self):
        return f"<SurveyRate {self.submission_id} {self.role_key}/{self.band_key}>"
