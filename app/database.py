import os

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./task_manager.db")

Base = declarative_base()


def create_session_factory(database_url: str = DATABASE_URL) -> sessionmaker:
    """Open the durable substrate at ``database_url`` and make sure its tables exist."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # handlers run on FastAPI's thread pool
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, connect_args=connect_args)

    from . import models  # noqa: F401  registers region_entries on Base
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
