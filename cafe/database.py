from collections.abc import Callable

from sqlmodel import SQLModel, create_engine, Session

from cafe.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Supabase Postgres connection (via pooler)
#
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=1       : keep only 1 connection to the Supabase pooler
# - max_overflow=0    : do not open extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
#
# Supabase Session mode limits the number of clients; the default
# SQLAlchemy pool quickly hits "MaxClientsInSessionMode".
#
# Non-Postgres URLs (local SQLite) get no pooler settings.
# ---------------------------------------------------------

db_url = settings.DATABASE_URL

if db_url.startswith("postgres"):
    # Append sslmode=require if it is not already present
    if "sslmode=" not in db_url:
        if "?" in db_url:
            db_url = db_url + "&sslmode=require"
        else:
            db_url = db_url + "?sslmode=require"
    engine_options = {
        "pool_pre_ping": True,
        "pool_size": 1,
        "max_overflow": 0,
    }
else:
    engine_options = {"connect_args": {"check_same_thread": False}}

engine = create_engine(
    db_url,
    echo=False,        # set to True if you want to debug SQL queries
    **engine_options,
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


def get_session_factory() -> Callable[[], Session]:
    """
    FastAPI dependency for long-lived handlers (WebSocket feeds).

    A feed refreshes many times over its lifetime, so it opens a short
    session per refresh instead of holding one for the whole connection.
    """
    return lambda: Session(engine)
