# Pydantic schemas
from app.schemas.auth import (
    UserLogin,
    LoginResponse,
    ChangePasswordRequest,
    ChangePasswordResponse,
    TokenData,
)
from app.schemas.survey import (
    REGIONS,
    CompanyInfo,
    RateEntry,
    SurveyPayload,
    SubmissionResponse,
)
from app.schemas.admin import ExportStats

__all__ = [
    # Auth
    "UserLogin",
    "LoginResponse",
    "ChangePasswordRequest",
    "ChangePasswordResponse",
    "TokenData",
    # Survey
    "REGIONS",
    "CompanyInfo",
    "RateEntry",
    "SurveyPayload",
    "SubmissionResponse",
    # Admin
    "ExportStats",
]
