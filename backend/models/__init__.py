from .base import Base, async_database_url, create_session_factory
from .document import DocumentRecord

__all__ = [
    "Base",
    "async_database_url",
    "create_session_factory",
    "DocumentRecord",
]
