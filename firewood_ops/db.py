from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from firewood_ops.config import settings
from firewood_ops.models.base import Base

# Create engine
engine = create_async_engine(settings.database_url, echo=settings.sql_echo)

# Async session maker (scripts and the default app)
async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


def build_session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


# Dependency: sessions come from the engine of the app serving the request
async def get_db(request: Request):
    async with request.app.state.session_factory() as session:
        yield session

async def create_db_and_tables(db_engine=None):
    import firewood_ops.models  # registers every table on Base.metadata

    async with (db_engine or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

# Reusable engine getter
def get_async_engine():
    return engine
