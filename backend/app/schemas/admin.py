from pydantic import BaseModel, ConfigDict, Field


class ExportStats(BaseModel):
    """Row counts shown on the admin dashboard"""
    model_config = ConfigDict(populate_by_name=True)

    total_submissions: int = Field(..., alias="totalSubmissions")
    total_rates: int = Field(..., alias="totalRates")
