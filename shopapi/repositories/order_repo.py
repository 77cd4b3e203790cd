# shopapi/repositories/order_repo.py
from datetime import datetime

from sqlalchemy import update
from sqlmodel import Session, select

from shopapi.models.order import Order, OrderItem
from shopapi.models.product import Product, ProductVariant
from shopapi.models.user import User


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; order creation and status changes are
        multi-step transactions owned by the service.
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def list_all_with_email(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
    ) -> list[tuple[Order, str]]:
        """
        All orders, newest first, each paired with the customer's email.
        """
        stmt = (
            select(Order, User.email)
            .join(User, Order.user_id == User.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def list_with_email_by_ids(
        self,
        session: Session,
        order_ids: list[int],
    ) -> list[tuple[Order, str]]:
        if not order_ids:
            return []
        stmt = (
            select(Order, User.email)
            .join(User, Order.user_id == User.id)
            .where(Order.id.in_(order_ids))
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return session.exec(stmt).all()

    def get_by_id(self, session: Session, order_id: int) -> Order | None:
        return session.get(Order, order_id)

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        session.refresh(order)
        return order

    def transition_status(
        self,
        session: Session,
        order_id: int,
        current: str,
        new: str,
        updated_at: datetime,
    ) -> bool:
        """
        Move an order from `current` to `new` in a single conditional UPDATE.

        Returns False when the stored status is no longer `current`
        (another request changed it first); nothing is written then.
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status == current)
            .values(status=new, updated_at=updated_at)
        )
        result = session.connection().execute(stmt)
        return result.rowcount == 1

    # ---- Order items ----

    def list_items_for_orders(
        self,
        session: Session,
        order_ids: list[int],
    ) -> list[OrderItem]:
        if not order_ids:
            return []
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id.in_(order_ids))
            .order_by(OrderItem.id)
        )
        return session.exec(stmt).all()

    def list_items_with_catalog(
        self,
        session: Session,
        order_ids: list[int],
    ) -> list[tuple[OrderItem, Product | None, ProductVariant | None]]:
        """
        Items of the given orders joined with their product and variant.

        Outer joins: a variant that has since been deleted leaves
        variant_id NULL on the item and yields None here.
        """
        if not order_ids:
            return []
        stmt = (
            select(OrderItem, Product, ProductVariant)
            .outerjoin(Product, OrderItem.product_id == Product.id)
            .outerjoin(
                ProductVariant,
                (OrderItem.variant_id == ProductVariant.id)
                & (OrderItem.product_id == ProductVariant.product_id),
            )
            .where(OrderItem.order_id.in_(order_ids))
            .order_by(OrderItem.id)
        )
        return session.exec(stmt).all()

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        for item in items:
            session.refresh(item)
        return items
