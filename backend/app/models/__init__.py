# Re-export all models for convenient imports
from app.models.user import User
from app.models.survey import SurveySubmission, SurveyRate

__all__ = [
    # Staff
    "User",
    # Survey
    "SurveySubmission",
    "SurveyRate",
]
