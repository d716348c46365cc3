"""
Database layer for the OpsBoard report service.

This package provides the SQLModel entities mirroring the BaaS tables the
report pipeline reads and writes, and the async repositories over them.

Structure:
- entities/: SQLModel table models, one module per table family
- repositories/: Data access layer and the repository bundle
- session.py: Global engine and session factory management
- utils.py: Engine, session factory and table creation helpers
"""

from .base import Base, UTCDateTime, as_utc, new_id, utc_column, utc_now
from .session import (
    async_session_maker,
    engine,
    init_db,
)
from .utils import (
    create_all,
    create_engine,
    create_sessionmaker,
)

__all__ = [
    "Base",
    "UTCDateTime",
    "as_utc",
    "async_session_maker",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "engine",
    "init_db",
    "new_id",
    "utc_column",
    "utc_now",
]
