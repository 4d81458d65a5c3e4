from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from relief_inventory.core_settings import get_settings
from relief_inventory.domain.models import Base

settings = get_settings()
DATABASE_URL = settings.database_url

def build_engine(url: str):
    if url.startswith("sqlite"):
        engine = create_engine(url, echo=False, future=True, connect_args={"check_same_thread": False, "timeout": 30})

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    return create_engine(url, echo=False, future=True, pool_pre_ping=True)

def build_sessionmaker(bind) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, expire_on_commit=False)

engine = build_engine(DATABASE_URL)
SessionLocal = build_sessionmaker(engine)

def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_models():
    Base.metadata.create_all(engine)
