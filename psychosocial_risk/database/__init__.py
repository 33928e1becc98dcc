"""
Database Package Initialization.

Engine, sessions and transaction scope for the SQLAlchemy
storage collaborators in `psychosocial_risk.repository`.
"""

from .engine import (
    # Declarative base
    Base,
    DEFAULT_DATABASE_URL,

    # Engine creation
    get_database_url,
    create_database_engine,
    get_engine,
    dispose_engine,

    # Session management
    get_session,
    get_session_factory,
    transaction_scope,

    # Database initialization
    initialize_database,
    verify_database_connection,
    create_all_tables,

    # Exceptions
    DatabasePersistenceError,
    DatabaseConnectionError,
    DatabaseInitializationError,
)


__all__ = [
    "Base",
    "DEFAULT_DATABASE_URL",
    "get_database_url",
    "create_database_engine",
    "get_engine",
    "dispose_engine",
    "get_session",
    "get_session_factory",
    "transaction_scope",
    "initialize_database",
    "verify_database_connection",
    "create_all_tables",
    "DatabasePersistenceError",
    "DatabaseConnectionError",
    "DatabaseInitializationError",
]
