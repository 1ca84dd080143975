from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .config import Settings


settings = Settings()

# Synchronous engine; psycopg against Postgres in deployment
engine = create_engine(settings.database_url, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
