"""Subsidy Deadline Engine - API Routers"""
from .applications import router as applications_router
from .deadlines import router as deadlines_router
from .reminders import router as reminders_router

__all__ = [
    "applications_router",
    "deadlines_router",
    "reminders_router",
]
