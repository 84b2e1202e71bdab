from app.services.credentials import CredentialService
from app.services.survey_writer import SurveyWriter
from app.services.survey_export import SurveyExportService

__all__ = [
    "CredentialService",
    "SurveyWriter",
    "SurveyExportService",
]
