"""
API Router

Every resource lives under /api. All endpoints except login and register
require a session token.
"""

from fastapi import APIRouter
from . import (
    analytics,
    auth,
    clients,
    clinical_trials,
    dashboard,
    enrollments,
    files,
    hospitals,
    news,
    news_updates,
    pdfs,
    settings,
    study_protocols,
    training_materials,
    users,
)

router = APIRouter()

router.include_router(auth.router)
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(clinical_trials.router, prefix="/clinical-trials", tags=["Clinical Trials"])
router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
router.include_router(news_updates.router, prefix="/news-updates", tags=["News Updates"])
router.include_router(training_materials.router, prefix="/training-materials", tags=["Training Materials"])
router.include_router(study_protocols.router, prefix="/study-protocols", tags=["Study Protocols"])
router.include_router(files.router, prefix="/files", tags=["Files"])
router.include_router(hospitals.router, prefix="/hospitals", tags=["Hospitals"])
router.include_router(news.router, prefix="/news", tags=["News"])
router.include_router(pdfs.router, prefix="/pdfs", tags=["PDF Documents"])
router.include_router(clients.router, prefix="/clients", tags=["Clients"])
router.include_router(settings.router, prefix="/settings", tags=["Settings"])
router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
