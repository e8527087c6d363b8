"""SQLAlchemy (async) adapters. Requires the ``sqlalchemy`` extra."""

from __future__ import annotations

from .repository import SQLAlchemyRepository
from .unit_of_work import SessionManagementError, SQLAlchemyUnitOfWork

__all__ = [
    "SQLAlchemyRepository",
    "SQLAlchemyUnitOfWork",
    "SessionManagementError",
]
