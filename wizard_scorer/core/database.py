from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from wizard_scorer.core.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# SQLite connections are shared across the request threadpool
connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=connect_args,
    echo=settings.DEBUG
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
