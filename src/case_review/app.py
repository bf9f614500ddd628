"""
Case Review Backend API Server
Core functionality: Cases, Review Lifecycle, Comments, Attachments, Reports, Decision emails via Resend
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from case_review import __version__
from case_review.config import settings
from case_review.api.routes import health, cases, reports
from case_review.services.cases_service import CaseStore
from case_review.services.demo_cases import seed_demo_cases
from case_review.services.email_service import DecisionNotifier
from case_review.utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)

def create_store() -> CaseStore:
    """Build the application's CaseStore from settings"""
    store = CaseStore(enforce_required_documents=settings.ENFORCE_REQUIRED_DOCUMENTS)

    if settings.notifications_enabled():
        store.subscribe(DecisionNotifier(from_email=settings.FROM_EMAIL))
        logger.info("Decision notifications enabled via Resend")

    if settings.SEED_DEMO_CASES:
        seed_demo_cases(store)

    return store

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    app.state.case_store = create_store()
    yield
    logger.info(f"Shutting down with {len(app.state.case_store.list_cases())} cases in memory")

# FastAPI app initialization
app = FastAPI(
    title="Case Review Backend",
    description="Backend API for client account-change cases reviewed by the OKW and CDD teams",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Setup centralized error handling
setup_error_handling(app)

# Include API routes
app.include_router(health.router, tags=["Health"])
app.include_router(cases.router, prefix="/api/cases", tags=["Cases"])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])

# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
