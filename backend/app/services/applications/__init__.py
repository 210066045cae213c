"""
Application Services

Application store (records, overrides, dispatch history) and the edit path
that keeps cached deadlines in sync with the conversion date.
"""

from .store import ApplicationStore
from .service import ApplicationService

__all__ = [
    'ApplicationStore',
    'ApplicationService',
]
