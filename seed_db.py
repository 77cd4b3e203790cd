# seed_db.py
"""
Provision users and (optionally) a demo catalog.

Users are never self-registered through the API: every Firebase account
that should reach the backend needs an approved row here.

    python seed_db.py --admin ops@example.com --customer jane@example.com
    python seed_db.py --demo-catalog
"""
import argparse

from sqlmodel import Session, select

from shopapi.core.config import get_settings
from shopapi.database import atomic, create_db_and_tables, create_db_engine
from shopapi.models.product import Product, ProductVariant
from shopapi.models.user import User
from shopapi.repositories.user_repo import UserRepository

DEMO_CATALOG = [
    {
        "product": {
            "name": "Classic Tee",
            "description": "Cotton crew-neck t-shirt",
            "price": 1500,
        },
        "variants": [
            {"name": "Black / M", "color": "Black", "size": "M", "price": 1500, "stock": 20},
            {"name": "White / L", "color": "White", "size": "L", "price": 1600, "stock": 12},
        ],
    },
    {
        "product": {
            "name": "Canvas Tote",
            "description": "Everyday tote bag",
            "price": 900,
        },
        "variants": [],
    },
]


def provision_user(session: Session, email: str, role: str) -> User:
    """Create or update an approved user with the given role."""
    repo = UserRepository()
    user = repo.get_by_email(session, email) or User(email=email)
    user.role = role
    user.approved = True
    return repo.save(session, user)


def seed_catalog(session: Session) -> int:
    """Insert the demo catalog when no product exists yet."""
    if session.exec(select(Product)).first() is not None:
        return 0

    with atomic(session):
        for entry in DEMO_CATALOG:
            product = Product(**entry["product"])
            session.add(product)
            session.flush()
            for variant in entry["variants"]:
                session.add(ProductVariant(product_id=product.id, **variant))
    return len(DEMO_CATALOG)


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--admin", action="append", default=[], metavar="EMAIL")
    parser.add_argument("--customer", action="append", default=[], metavar="EMAIL")
    parser.add_argument("--demo-catalog", action="store_true")
    args = parser.parse_args()

    engine = create_db_engine(get_settings())
    create_db_and_tables(engine)

    with Session(engine) as session:
        for email in args.admin:
            provision_user(session, email, "admin")
            print(f"Approved admin: {email}")
        for email in args.customer:
            provision_user(session, email, "customer")
            print(f"Approved customer: {email}")
        if args.demo_catalog:
            created = seed_catalog(session)
            print(f"Demo catalog: {created} products inserted.")


if __name__ == "__main__":
    main()
