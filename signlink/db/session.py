"""
Database session management for the signlink application.
"""

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging(
    name="signlink.db",
    logfile="signlink.log",
    level=None
)


def _use_immediate_transactions(engine):
    """Start every SQLite transaction with BEGIN IMMEDIATE (write lock up front)."""
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def get_engine(database_url: str):
    """Create the SQLAlchemy engine for `database_url` and check it connects."""
    logger.debug("Using DATABASE_URL: %s", database_url.split("@")[-1])

    connect_args = {}
    if database_url.startswith("sqlite"):
        # Writers on the same file wait instead of failing immediately
        connect_args = {"check_same_thread": False, "timeout": 30}

    try:
        engine = create_engine(database_url, connect_args=connect_args)
        if database_url.startswith("sqlite"):
            _use_immediate_transactions(engine)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            logger.debug("Successfully connected to database")
    except Exception as e:
        logger.error("Failed to connect to database: %s", str(e), exc_info=True)
        raise
    return engine


def create_session_factory(engine):
    """Sessions hand back detached objects that stay readable after close."""
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine):
    from signlink.db.models import Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created.")
