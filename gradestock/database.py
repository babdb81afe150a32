"""Database configuration and initialization."""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()

# Global session and engine
engine = None
db_session = None


def _engine_options(database_uri: str, echo: bool) -> dict:
    """Engine keyword arguments for the configured backend."""
    if database_uri.startswith('sqlite'):
        # In-memory SQLite must share one connection across the session registry
        return {
            'echo': echo,
            'connect_args': {'check_same_thread': False},
            'poolclass': StaticPool,
        }
    return {
        'echo': echo,
        'pool_pre_ping': True,  # Enable connection health checks
        'pool_size': 10,
        'max_overflow': 20,
    }


def init_db(app):
    """Initialize database connection."""
    global engine, db_session

    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine = create_engine(
        database_uri,
        **_engine_options(database_uri, app.config.get('SQLALCHEMY_ECHO', False))
    )

    # Objects stay readable after commit so views can serialize them
    db_session = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    )

    Base.query = db_session.query_property()

    if app.config.get('AUTO_CREATE_TABLES'):
        create_tables()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_tables():
    """Create every mapped table that does not exist yet."""
    # Import models so they are registered on Base.metadata
    import gradestock.models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_tables():
    """Drop every mapped table (test teardown)."""
    import gradestock.models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


def ping() -> bool:
    """Run a trivial query against the database."""
    result = db_session.execute(text("SELECT 1 as health_check"))
    row = result.fetchone()
    return bool(row and row[0] == 1)


def get_session():
    """Get database session."""
    return db_session
