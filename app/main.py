"""
Main FastAPI application for the Work Hours Tracker
"""
import logging
import logging.config

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.config import settings, validate_settings
from app.database import engine, Base
from app.exceptions import AppError, app_error_handler
from app import models  # noqa: F401  register tables on Base.metadata

# Import API routes
from app.api import auth, users, teams, jobs, records, schedules, reports

# Configure logging
logging.config.dictConfig(settings.get_logging_config())
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Work Hours Tracker",
    description="Clock in/out, hourly earnings, overtime statistics and team roll-ups",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_tags=[
        {"name": "authentication", "description": "Registration, login and tokens"},
        {"name": "users", "description": "User profiles and account removal"},
        {"name": "teams", "description": "Teams, membership and manager roll-ups"},
        {"name": "jobs", "description": "Jobs and hourly rates"},
        {"name": "records", "description": "Clock-in/out records and statistics"},
        {"name": "schedules", "description": "Planned shifts"},
        {"name": "reports", "description": "Record exports"},
    ]
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error handlers
app.add_exception_handler(AppError, app_error_handler)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring"""
    try:
        # Test database connection
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "database": "connected",
            "version": "1.0.0"
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")


# Include API routes
for module in (auth, users, teams, jobs, records, schedules, reports):
    app.include_router(module.router, prefix=settings.API_PREFIX)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info("Starting Work Hours Tracker")

    missing = validate_settings()
    if missing:
        logger.warning(f"Missing or default settings: {', '.join(missing)}")

    # Create database tables if they don't exist
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized")


if __name__ == "__main__":
    import uvicorn

    # Development server
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
