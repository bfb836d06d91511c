"""
Database models and connection management for byline-scout.
"""
import contextlib
import datetime
import os
import threading
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Float, JSON, UniqueConstraint, create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from byline_scout.config import DATABASE_URL
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

# Global variables for database connections
DB_ENGINE = None
DB_SESSION = None
DB_URL = None
_init_lock = threading.Lock()

Base = declarative_base()


class AuthorProfileRecord(Base):
    """Enriched author profile, one row per profile URL."""
    __tablename__ = "author_profiles"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    outlet = Column(String(255), nullable=False, index=True)
    profile_url = Column(String(1024), nullable=False, unique=True)
    source = Column(String(50))  # directory, articleByline, metaTag, constructed
    role = Column(String(100))
    bio = Column(Text)
    email = Column(String(255))
    profile_picture = Column(String(1024))
    social_links = Column(JSON, default=dict)
    articles = Column(JSON, default=list)
    total_articles = Column(Integer, default=0)
    topics = Column(JSON, default=list)
    keywords = Column(JSON, default=list)
    top_keywords = Column(JSON, default=list)
    influence_score = Column(Float, default=0.0)
    article_based = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "outlet": self.outlet,
            "profile_url": self.profile_url,
            "source": self.source,
            "role": self.role,
            "bio": self.bio,
            "email": self.email,
            "profile_picture": self.profile_picture,
            "social_links": self.social_links or {},
            "articles": self.articles or [],
            "total_articles": self.total_articles or 0,
            "topics": self.topics or [],
            "keywords": self.keywords or [],
            "top_keywords": self.top_keywords or [],
            "influence_score": self.influence_score or 0.0,
            "article_based": bool(self.article_based),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<AuthorProfileRecord(id={self.id}, name='{self.name}', outlet='{self.outlet}')>"


class AuthorRecord(Base):
    """Legacy mirror of an author, one row per name and outlet."""
    __tablename__ = "authors"
    __table_args__ = (UniqueConstraint("name", "outlet", name="uq_author_name_outlet"),)

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    outlet = Column(String(255), nullable=False)
    profile_url = Column(String(1024))
    role = Column(String(100))
    total_articles = Column(Integer, default=0)
    topics = Column(JSON, default=list)
    influence_score = Column(Float, default=0.0)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def __repr__(self):
        return f"<AuthorRecord(id={self.id}, name='{self.name}', outlet='{self.outlet}')>"


def _create_engine(url: str):
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection so every session sees the same in-memory database
            kwargs["poolclass"] = StaticPool
        else:
            path = url.split("sqlite:///", 1)[-1]
            directory = os.path.dirname(path)
            if directory and not os.path.exists(directory):
                os.makedirs(directory)
        engine = create_engine(url, echo=False, **kwargs)

        @event.listens_for(engine, "connect")
        def receive_connect(dbapi_connection, connection_record):
            # Set busy timeout
            dbapi_connection.execute("PRAGMA busy_timeout = 60000")
        return engine

    return create_engine(url, echo=False, pool_pre_ping=True, pool_recycle=3600)


def init_db(url: str = None):
    """
    Initialize the database connection and create tables.

    Args:
        url: SQLAlchemy URL, defaults to DATABASE_URL. Passing a different URL
            than the current one replaces the engine.

    Returns:
        Tuple of (engine, session factory)
    """
    global DB_ENGINE, DB_SESSION, DB_URL
    url = url or DATABASE_URL

    with _init_lock:
        if DB_ENGINE is not None and DB_URL == url:
            return DB_ENGINE, DB_SESSION
        if DB_ENGINE is not None:
            DB_ENGINE.dispose()

        engine = _create_engine(url)
        Base.metadata.create_all(engine)
        DB_ENGINE = engine
        DB_SESSION = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
        DB_URL = url
        logger.info(f"Database initialized at {url}")
        return DB_ENGINE, DB_SESSION


def get_session_factory():
    """Get the session factory, initializing the default database if necessary."""
    if DB_SESSION is None:
        init_db()
    return DB_SESSION


@contextlib.contextmanager
def session_scope():
    """
    Provide a transactional scope around a series of operations.

    Commits on success, rolls back and re-raises on error.
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def close_connections():
    """Close all database connections and dispose of the engine."""
    global DB_ENGINE, DB_SESSION, DB_URL

    with _init_lock:
        if DB_ENGINE is not None:
            DB_ENGINE.dispose()
            logger.info("Database engine disposed")
        DB_ENGINE = None
        DB_SESSION = None
        DB_URL = None
