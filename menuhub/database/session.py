from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from menuhub.database.engine import async_session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency returning the session factory used by the catalog store.

    The store opens one short transaction per call so that per-item publish
    steps succeed or fail independently.
    """
    return async_session
