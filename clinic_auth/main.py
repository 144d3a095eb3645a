"""
Main FastAPI application entry point.
Configures the application, middleware, and includes routers.
"""
from dotenv import load_dotenv

# Load environment variables from .env file first
load_dotenv()

from fastapi import Depends, FastAPI, Response, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging
from .auth.router import router as auth_router
from .users.router import router as users_router
from .database import engine, SessionLocal, Base, get_db
from .config import settings
from .core import audit_models  # noqa: F401  registers the audit_logs table
from .core.bootstrap import bootstrap_admin_if_needed
from .core.middleware import setup_middlewares
from .exceptions import register_exception_handlers

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create database tables if they don't exist
Base.metadata.create_all(bind=engine)

# Bootstrap admin creation
logger.info("Starting Medical Clinic Auth API...")
db = SessionLocal()
try:
    bootstrap_admin_if_needed(db)
except Exception:
    logger.exception("Bootstrap process failed")
finally:
    db.close()

# Create FastAPI application
app = FastAPI(
    title="Medical Clinic Auth API",
    description="Authentication, session and role-based access control for the Medical Clinic system",
    version="1.0.0"
)

# Register exception handlers
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware
setup_middlewares(app)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)

# Root endpoint
@app.get("/")
def root():
    """
    Root endpoint for API health check.

    Returns:
        dict: Welcome message and API version
    """
    return {"message": "Welcome to Medical Clinic Auth API", "version": app.version}

# Health check endpoint
@app.get("/health")
def health_check(response: Response, db: Session = Depends(get_db)):
    """
    Health check endpoint for monitoring.

    Returns:
        dict: Health status information
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "unhealthy", "database": "disconnected"}
    return {"status": "healthy", "database": "connected"}
