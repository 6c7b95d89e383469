from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from fileshare.core.config import Settings

# Base class for all database models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE clauses unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> Engine:
    """
    Create the database engine - manages the connection pool.

    SQLite needs check_same_thread=False because FastAPI hands the session
    between threadpool workers, and foreign keys switched on so cascades
    behave the same as on PostgreSQL.
    """
    # SQLite is used for local runs and tests; anything else gets pooled connections
    if settings.DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    # pre_ping drops connections the server closed while idle
    return create_engine(settings.DATABASE_URL, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    # autocommit=False: changes require explicit commit
    # autoflush=False: don't auto-flush before queries
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    Dependency for getting a database session.

    The session factory lives on app.state and is built in the app lifespan.
    The session is always closed after the request completes.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
