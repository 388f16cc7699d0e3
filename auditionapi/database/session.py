from auditionapi.database.connection import SessionLocal


def get_db():
    """Request-scoped session; services commit through their own unit of work"""
    with SessionLocal() as db:
        yield db
