# shopcart/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from shopcart.api import create_app
from shopcart.data.database import Base, engine
from shopcart.data.models import CartModel, CartLineModel  # noqa: F401 rejestracja w metadata
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


def init_db():
    logger.info(f"Tworzenie tabel: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Nie udalo sie utworzyc tabel: {e}")
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = create_app(lifespan=lifespan)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
