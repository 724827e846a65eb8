"""
Database engine and session management
"""

from sqlmodel import SQLModel, Session, create_engine
import structlog

from tinbr.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()

# Process-wide engine, created once and reused for the process lifetime
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    connect_args=connect_args,
)


def init_db():
    """Initialize database tables"""
    # Models must be imported so their tables are registered on the metadata
    import tinbr.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created")


def get_session():
    """Dependency to get database session"""
    with Session(engine) as session:
        yield session
