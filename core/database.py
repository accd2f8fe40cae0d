from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Read from the environment or a local .env file."""
    DATABASE_URL: str = "sqlite:///./motorshop.db"
    TAX_RATE: Decimal = Decimal("0.08")
    DEFAULT_PAYMENT_TERMS: int = 30  # days
    RUN_MIGRATIONS_ON_STARTUP: bool = True
    ENABLE_SCHEDULER: bool = True
    RECONCILE_HOUR: int = 1  # local hour for the nightly status job
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()


def engine_options(database_url: str) -> dict:
    # SQLite connections are shared with the scheduler thread
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# The base for all declarative SQLAlchemy models
Base = declarative_base()


# Dependency to get DB session (FastAPI style)
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
