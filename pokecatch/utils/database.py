# pokecatch/utils/database.py
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from pokecatch.config import DATABASE_URL


def _engine_options(url: str) -> dict:
    # aiosqlite connections are not shared between event loops
    if url.startswith("sqlite"):
        return {"poolclass": NullPool}
    return {"pool_pre_ping": True}


engine = create_async_engine(DATABASE_URL, echo=False, future=True, **_engine_options(DATABASE_URL))
AsyncSessionLocal = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()


if DATABASE_URL.startswith("sqlite"):
    # SQLite ignores foreign keys unless asked per connection.
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Dependency for route injection
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
