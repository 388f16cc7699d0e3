from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from auditionapi.config import settings


def _engine_kwargs(database_url: str) -> dict:
    # Pool tuning only applies to Postgres; SQLite uses its own pool classes
    if not database_url.startswith("postgresql"):
        return {"connect_args": {"check_same_thread": False}} if "sqlite" in database_url else {}

    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,  # Supabase pooler drops idle connections
        "pool_recycle": 1800,
    }


engine = create_engine(
    settings.database_url,
    echo=settings.DEBUG,  # SQL logging in debug mode
    **_engine_kwargs(settings.database_url),
)

# expire_on_commit=False keeps loaded rows usable after the unit of work commits
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)
