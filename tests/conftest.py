from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session

from shopapi.core.config import Settings
from shopapi.core.identity import JwtIdentityVerifier
from shopapi.database import create_db_engine
from shopapi.main import create_app
from shopapi.models.order import Order, OrderItem
from shopapi.models.product import Product, ProductVariant
from shopapi.models.rider import Rider
from shopapi.models.user import User

SECRET = "test-secret"


def make_token(email: str | None, expires_in: int = 3600, secret: str = SECRET) -> str:
    now = datetime.now(timezone.utc)
    claims = {"sub": f"uid-{email}", "iat": now, "exp": now + timedelta(seconds=expires_in)}
    if email is not None:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm="HS256")


def bearer(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(email)}"}


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        IDENTITY_PROVIDER="jwt",
        JWT_SECRET=SECRET,
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    yield engine
    engine.dispose()


@pytest.fixture
def app(settings, engine):
    return create_app(
        settings=settings,
        engine=engine,
        identity_verifier=JwtIdentityVerifier(SECRET),
    )


@pytest.fixture
def client(app):
    # Entering the client runs the lifespan, which creates the tables.
    with TestClient(app) as c:
        yield c


@pytest.fixture
def add(engine, client):
    """Insert a row directly and return it (detached, attributes loaded)."""

    def _add(obj):
        with Session(engine) as s:
            s.add(obj)
            s.commit()
            s.refresh(obj)
        return obj

    return _add


@pytest.fixture
def db(engine, client):
    """Open a fresh session for assertions on database state."""
    with Session(engine) as s:
        yield s


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def auth_headers():
    return bearer


@pytest.fixture
def admin(add):
    return add(User(email="admin@example.com", role="admin", approved=True))


@pytest.fixture
def customer(add):
    return add(User(email="jane@example.com", role="customer", approved=True))


@pytest.fixture
def admin_headers(admin):
    return bearer(admin.email)


@pytest.fixture
def customer_headers(customer):
    return bearer(customer.email)


@pytest.fixture
def tee(add):
    """A product with two variants priced differently from the product."""
    product = add(Product(name="Classic Tee", description="Cotton", price=100, image="tee.png"))
    black = add(ProductVariant(product_id=product.id, name="Black / M", color="Black", size="M", price=150, stock=3))
    white = add(ProductVariant(product_id=product.id, name="White / L", color="White", size="L", price=175))
    return product, black, white


@pytest.fixture
def rider(add):
    return add(Rider(name="Ravi", email="ravi@riders.example.com"))


@pytest.fixture
def paid_order(add, customer, tee):
    product, black, _ = tee
    order = add(Order(user_id=customer.id, total=250, status="Paid"))
    add(OrderItem(order_id=order.id, product_id=product.id, variant_id=black.id, quantity=1, price=150))
    add(OrderItem(order_id=order.id, product_id=product.id, variant_id=None, quantity=1, price=100))
    return order
