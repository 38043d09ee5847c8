# SQLModel definitions, imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin, TimestampMixin, CreatedAtMixin  # noqa: F401
from .organization import Organization, Profile  # noqa: F401
from .clinical_trial import ClinicalTrial, UserClinicalAssignment  # noqa: F401
from .content import Enrollment, NewsUpdate, TrainingMaterial, StudyProtocol, FileRecord  # noqa: F401
from .shared import Hospital, NewsItem, PdfDocument, Client, UserAnalytics, AppSetting  # noqa: F401

# Table name -> model, used by the data sources to resolve generic queries.
TABLES = {
    model.__tablename__: model
    for model in (
        Organization,
        Profile,
        ClinicalTrial,
        UserClinicalAssignment,
        Enrollment,
        NewsUpdate,
        TrainingMaterial,
        StudyProtocol,
        FileRecord,
        Hospital,
        NewsItem,
        PdfDocument,
        Client,
        UserAnalytics,
        AppSetting,
    )
}
