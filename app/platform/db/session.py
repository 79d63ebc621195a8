from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.platform.config import settings


def _engine_options(url: str) -> dict:
    # SQLite connections are cheap and must not be shared across event loops
    if url.startswith("sqlite"):
        return {"poolclass": NullPool}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 1800,
        "pool_size": 20,
        "max_overflow": 30,  # (burst capacity)
        "pool_timeout": 30,
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    **_engine_options(settings.DATABASE_URL),
)

if engine.dialect.name == "sqlite":
    # Let SQLAlchemy own BEGIN so SAVEPOINTs behave (upload fallback relies on them)
    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _sqlite_begin(conn):
        conn.exec_driver_sql("BEGIN")


SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)


async def get_db():
    async with SessionLocal() as session:
        yield session
