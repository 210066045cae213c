"""
Subsidy Deadline Engine - FastAPI Application

Main entry point for the subsidy deadline backend.

Architecture:
- Conversion date → DeadlineCalculator → cached deadlines on the application
- Admin override → effective application window (store layer)
- Daily trigger → ReminderScheduler → Notifier → dispatch history
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import LOG_LEVEL
from .routers import applications_router, deadlines_router, reminders_router
from .database import init_db


logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Subsidy Deadline Engine",
    description="""
    Subsidy Deadline Engine - Deadline Tracking and Reminder System

    Derives Career-Up subsidy deadlines from the employment conversion date
    and sends reminders before the application window closes.

    ## Deadlines
    1. **Plan end**: conversion + 5 years, or + 6 months (selected strategy)
    2. **Wage payment end**: conversion + 7 months
    3. **Application window**: the day after wage payment end, for 2 months
    4. **Career plan filing**: the day before conversion

    ## Reminders
    - Sent 7, 3 and 1 days before the application window closes
    - Each threshold is sent at most once per application
    - Manual reminders can be resent at any time
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(applications_router)
app.include_router(deadlines_router)
app.include_router(reminders_router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Subsidy Deadline Engine",
        "version": "1.0.0",
        "description": "Deadline Tracking and Reminder System",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# For running with: python -m app.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
