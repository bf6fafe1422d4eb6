from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from socialhub.config import settings

DATABASE_URL = settings.database_url  # default: sqlite:///./socialhub.db


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        # drop connections the server closed between scheduler ticks
        return {"pool_pre_ping": True}
    options = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # in-memory databases live on a single connection
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
