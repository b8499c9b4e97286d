from menuhub.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from menuhub.database.engine import async_session, engine
from menuhub.database.session import get_session_factory

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "async_session",
    "engine",
    "get_session_factory",
]
