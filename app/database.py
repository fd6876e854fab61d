# app/database.py
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Database connection
#
# - PostgreSQL (production):
#     sslmode=require when DATABASE_SSL is set
#     pool_pre_ping=True to validate pooled connections
# - SQLite (local runs / tests):
#     check_same_thread=False because FastAPI runs sync handlers
#     and background tasks in a threadpool
# ---------------------------------------------------------

db_url = settings.DATABASE_URL
connect_args: dict = {}

if db_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False
elif settings.DATABASE_SSL and "sslmode=" not in db_url:
    if "?" in db_url:
        db_url = db_url + "&sslmode=require"
    else:
        db_url = db_url + "?sslmode=require"

engine = create_engine(
    db_url,
    echo=False,        # set to True if you want to debug SQL queries
    pool_pre_ping=True,
    connect_args=connect_args,
)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
