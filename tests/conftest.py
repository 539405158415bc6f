import os

import pytest

# testy na sqlite w pamieci, bez postgresa
os.environ.setdefault("DATABASE_URL", "sqlite://")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shopcart.data.database import Base
from shopcart.data.models import CartModel, CartLineModel  # noqa: F401
from shopcart.repos.cart_repo import CartRepo
from shopcart.services.cart_service import CartService
from shopcart.services.product_client import InMemoryVariantResolver


@pytest.fixture(scope='function')
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope='function')
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope='function')
def session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def catalog():
    """Katalog w pamieci z kilkoma wariantami."""
    catalog = InMemoryVariantResolver()
    catalog.put_variant("kbd", "kbd-us", "199.99", stock=10, variant_type="US layout")
    catalog.put_variant("kbd", "kbd-pl", "209.99", stock=3, variant_type="PL layout")
    catalog.put_variant("mouse", "mouse-std", "49.50", stock=25)
    catalog.put_variant("monitor", "mon-27", "899.00", stock=1)
    return catalog


@pytest.fixture(scope='function')
def service(session, catalog):
    return CartService(db=session, resolver=catalog)


@pytest.fixture(scope='function')
def repo(session):
    return CartRepo(session)
