from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, Optional, Union

# Region options offered by the survey form
REGIONS = (
    "Northland",
    "Auckland",
    "Waikato",
    "Bay of Plenty",
    "Gisborne",
    "Hawkes Bay",
    "Taranaki",
    "Manawatu-Whanganui",
    "Wellington",
    "Tasman",
    "Nelson",
    "Marlborough",
    "West Coast",
    "Canterbury",
    "Otago",
    "Southland",
)

# Numbers arrive as strings from form inputs, but plain JSON numbers are accepted too
NumericInput = Optional[Union[str, int, float]]


class CompanyInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    company_name: str = Field(..., alias="companyName", max_length=255)
    ranz_member_number: Optional[str] = Field(None, alias="ranzMemberNumber", max_length=100)
    region: str
    total_staff: NumericInput = Field(None, alias="totalStaff")
    is_lbp: bool = Field(False, alias="isLbp")

    @field_validator("company_name")
    @classmethod
    def company_name_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("Company name is required")
        return v

    @field_validator("region")
    @classmethod
    def region_is_known(cls, v: str) -> str:
        if v not in REGIONS:
            raise ValueError(f"Region must be one of: {', '.join(REGIONS)}")
        return v

    @field_validator("ranz_member_number")
    @classmethod
    def blank_member_number_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class RateEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hourly_rate: NumericInput = Field(None, alias="hourlyRate")
    charge_out_rate: NumericInput = Field(None, alias="chargeOutRate")


class SurveyPayload(BaseModel):
    """Body of POST /api/submit-survey"""
    model_config = ConfigDict(populate_by_name=True)

    company: CompanyInfo
    # role key -> band key -> rate entry; keys come from the form's catalog
    rates: Optional[Dict[str, Dict[str, RateEntry]]] = None
    # Opaque blobs (hoursBeforeOvertime, perKmRate, notes, ...), stored exactly as sent
    overtime: Optional[Dict[str, Any]] = None
    mileage: Optional[Dict[str, Any]] = None
    other_benefits: Optional[str] = Field(None, alias="otherBenefits")


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    submission_id: int = Field(..., alias="submissionId")
