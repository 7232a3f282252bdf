from review_platform.infrastructure.database.session import (
    DatabaseSession,
    close_db,
    create_tables,
    get_engine,
    get_session_factory,
)

__all__ = [
    "DatabaseSession",
    "close_db",
    "create_tables",
    "get_engine",
    "get_session_factory",
]
