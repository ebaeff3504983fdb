"""
Database package for the coffee batch registry
"""

from .models import Base, CoffeeBatch, BatchStatusUpdate
from .connection import get_db, get_session, engine, init_database
from .crud import (
    create_batch,
    get_batch,
    get_all_batches,
    record_mint,
    record_status_update,
    get_batch_history,
)

__all__ = [
    "Base",
    "CoffeeBatch",
    "BatchStatusUpdate",
    "get_db",
    "get_session",
    "engine",
    "init_database",
    "create_batch",
    "get_batch",
    "get_all_batches",
    "record_mint",
    "record_status_update",
    "get_batch_history",
]
