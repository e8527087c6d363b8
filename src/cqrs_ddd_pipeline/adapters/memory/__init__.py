"""In-memory adapters for tests and single-process use."""

from __future__ import annotations

from .database import InMemoryDatabase
from .repository import InMemoryRepository
from .unit_of_work import InMemoryUnitOfWork, in_memory_unit_of_work_factory

__all__ = [
    "InMemoryDatabase",
    "InMemoryRepository",
    "InMemoryUnitOfWork",
    "in_memory_unit_of_work_factory",
]
