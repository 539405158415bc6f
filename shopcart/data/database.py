# shopcart/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from shopcart.utils.settings import DATABASE_URL, DB_POOL_TIMEOUT_SECONDS, DB_STATEMENT_TIMEOUT_MS


def build_engine(url: str = DATABASE_URL, **kwargs):
    if url.startswith("postgresql"):
        # kazde zapytanie ma limit czasu, nic nie wisi w nieskonczonosc
        kwargs.setdefault("pool_timeout", DB_POOL_TIMEOUT_SECONDS)
        kwargs.setdefault(
            "connect_args",
            {"options": f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}"},
        )
    return create_engine(url, pool_pre_ping=True, **kwargs)


engine = build_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
