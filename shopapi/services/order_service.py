# shopapi/services/order_service.py
import logging
from collections import defaultdict
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from shopapi.database import atomic
from shopapi.models.order import Order, OrderItem
from shopapi.models.product import Product, ProductVariant
from shopapi.models.rider import Rider
from shopapi.repositories.order_repo import OrderRepository
from shopapi.repositories.product_repo import ProductRepository
from shopapi.repositories.rider_repo import RiderRepository
from shopapi.schemas.auth import AuthContext
from shopapi.schemas.order import (
    AdminOrderRead,
    AssignedRiderRead,
    ItemProductRead,
    ItemVariantRead,
    OrderCreate,
    OrderItemCreate,
    OrderItemRead,
    OrderStatusRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
)

logger = logging.getLogger(__name__)

# Allowed status transitions. Shipped -> Shipped is a rider reassignment.
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "Paid": {"Shipped"},
    "Shipped": {"Shipped", "Delivered", "Undelivered"},
    "Delivered": set(),
    "Undelivered": set(),
}


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Validate checkout items against the catalog
      - Create order + items in one transaction, capturing prices
      - Assemble order views (items, catalog details, rider) in batches
      - Enforce the status state machine and rider assignment (admin)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        rider_repo: RiderRepository,
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.rider_repo = rider_repo

    # -------- User-facing operations --------

    def create_order(
        self,
        session: Session,
        ctx: AuthContext,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Place an order for the authenticated user.

        Steps:
          1. Resolve every item against the catalog (400 on unknown
             product / variant). Nothing is written yet.
          2. In one transaction: insert the Order (status='Paid') and its
             OrderItem rows with the current unit price.
          3. Any database failure rolls back both and returns 500.

        Stock is informational and is not decremented.
        """
        prices = self._resolve_prices(session, payload.items)

        try:
            with atomic(session):
                order = self.order_repo.create_order(
                    session,
                    Order(user_id=ctx.id, total=payload.total, status="Paid"),
                )
                order_id = order.id
                self.order_repo.create_items(
                    session,
                    [
                        OrderItem(
                            order_id=order_id,
                            product_id=item.product_id,
                            variant_id=item.variant_id,
                            quantity=item.quantity,
                            price=price,
                        )
                        for item, price in zip(payload.items, prices)
                    ],
                )
        except SQLAlchemyError:
            logger.exception("Order creation rolled back for user %s", ctx.id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create order. Please try again.",
            )

        logger.info(
            "Order %s created by user %s (%d items, total %d)",
            order_id,
            ctx.id,
            len(payload.items),
            payload.total,
        )

        order = self.order_repo.get_by_id(session, order_id)
        items = self.order_repo.list_items_for_orders(session, [order_id])
        dto = OrderWithItemsRead.model_validate(order, update={"items": []})
        dto.items = [OrderItemRead.model_validate(it) for it in items]
        return dto

    def list_user_orders(
        self,
        session: Session,
        ctx: AuthContext,
        skip: int = 0,
        limit: int = 100,
    ) -> list[OrderWithItemsRead]:
        """
        The caller's orders, newest first, each with its items.
        """
        orders = self.order_repo.list_for_user(session, ctx.id, skip, limit)
        items_by_order = self._items_by_order(session, [o.id for o in orders])

        result: list[OrderWithItemsRead] = []
        for order in orders:
            dto = OrderWithItemsRead.model_validate(order, update={"items": []})
            dto.items = items_by_order.get(order.id, [])
            result.append(dto)
        return result

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AdminOrderRead]:
        """
        All orders with customer email, items and current rider (admin only).
        """
        rows = self.order_repo.list_all_with_email(session, skip, limit)
        return self._build_admin_views(session, rows)

    def get_order_admin(self, session: Session, order_id: int) -> AdminOrderRead:
        order = self._get_or_404(session, order_id)
        rows = self.order_repo.list_with_email_by_ids(session, [order.id])
        return self._build_admin_views(session, rows)[0]

    def update_status(
        self,
        session: Session,
        order_id: int,
        payload: OrderStatusUpdate,
    ) -> OrderStatusRead:
        """
        Admin-only status update with rider assignment:

          Paid      -> Shipped            (rider_id required)
          Shipped   -> Shipped            (rider_id required, reassigns)
          Shipped   -> Delivered, Undelivered
          Delivered -> (no change)
          Undelivered -> (no change)

        Rider lookup, assignment and status write share one transaction:
        a missing rider leaves status and assignment untouched. The status
        write only applies if the order still has the status that was
        validated; otherwise 409.
        """
        order = self._get_or_404(session, order_id)

        current = order.status
        new = payload.status

        if current not in ALLOWED_TRANSITIONS or new not in ALLOWED_TRANSITIONS[current]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

        if new == "Shipped" and payload.rider_id is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A rider is required to ship an order",
            )

        try:
            with atomic(session):
                # Conditional on the status checked above: a concurrent
                # update that already moved the order makes this a no-op.
                moved = self.order_repo.transition_status(
                    session, order.id, current, new, datetime.now(timezone.utc)
                )
                if not moved:
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail="Order status was changed by another request",
                    )

                if new == "Shipped":
                    rider = self.rider_repo.get_by_id(session, payload.rider_id)
                    if rider is None:
                        raise HTTPException(
                            status_code=status.HTTP_404_NOT_FOUND,
                            detail="Rider not found",
                        )
                    self.rider_repo.assign(session, order.id, rider.id)
        except SQLAlchemyError:
            logger.exception("Status update rolled back for order %s", order_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update order status",
            )

        logger.info("Order %s: %s -> %s", order_id, current, new)

        session.refresh(order)
        dto = OrderStatusRead.model_validate(order)
        assignment = self.rider_repo.get_assignment(session, order_id)
        if assignment is not None:
            rider = self.rider_repo.get_by_id(session, assignment.rider_id)
            dto.rider_id = rider.id
            dto.rider_name = rider.name
            dto.rider_email = rider.email
        return dto

    # -------- Helpers --------

    def _get_or_404(self, session: Session, order_id: int) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _resolve_prices(
        self,
        session: Session,
        items: list[OrderItemCreate],
    ) -> list[int]:
        """
        Unit price per requested item: the variant's price when a variant
        is given, the product's price otherwise.

        Products and variants are fetched in two batched queries.

        Raises:
            HTTPException(400): unknown product, or variant not belonging
            to its product.
        """
        products: dict[int, Product] = {
            p.id: p
            for p in self.product_repo.list_by_ids(
                session, sorted({i.product_id for i in items})
            )
        }
        variants: dict[int, ProductVariant] = {
            v.id: v
            for v in self.product_repo.list_variants_by_ids(
                session, sorted({i.variant_id for i in items if i.variant_id is not None})
            )
        }

        prices: list[int] = []
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Product with ID {item.product_id} not found",
                )

            if item.variant_id is None:
                prices.append(product.price)
                continue

            variant = variants.get(item.variant_id)
            if variant is None or variant.product_id != product.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=(
                        f"Variant with ID {item.variant_id} not found "
                        f"for product {item.product_id}"
                    ),
                )
            prices.append(variant.price)

        return prices

    @staticmethod
    def _item_read(
        item: OrderItem,
        product: Product | None,
        variant: ProductVariant | None,
    ) -> OrderItemRead:
        dto = OrderItemRead.model_validate(item)
        if product is not None:
            dto.product = ItemProductRead(
                id=product.id,
                name=product.name,
                price=product.price,
                image=product.image,
            )
        if variant is not None:
            dto.variant = ItemVariantRead(
                id=variant.id,
                name=variant.name,
                color=variant.color,
                size=variant.size,
                price=variant.price,
            )
        return dto

    def _items_by_order(
        self,
        session: Session,
        order_ids: list[int],
    ) -> dict[int, list[OrderItemRead]]:
        """
        Items (with product / variant details) grouped by order_id.
        """
        grouped: dict[int, list[OrderItemRead]] = defaultdict(list)
        for item, product, variant in self.order_repo.list_items_with_catalog(
            session, order_ids
        ):
            grouped[item.order_id].append(self._item_read(item, product, variant))
        return grouped

    def _riders_by_order(
        self,
        session: Session,
        order_ids: list[int],
    ) -> dict[int, Rider]:
        return {
            assignment.order_id: rider
            for assignment, rider in self.rider_repo.list_assignments_for_orders(
                session, order_ids
            )
        }

    def _build_admin_views(
        self,
        session: Session,
        rows: list[tuple[Order, str]],
    ) -> list[AdminOrderRead]:
        order_ids = [order.id for order, _ in rows]
        items_by_order = self._items_by_order(session, order_ids)
        riders_by_order = self._riders_by_order(session, order_ids)

        result: list[AdminOrderRead] = []
        for order, user_email in rows:
            dto = AdminOrderRead.model_validate(order, update={"items": []})
            dto.items = items_by_order.get(order.id, [])
            dto.user_email = user_email
            rider = riders_by_order.get(order.id)
            if rider is not None:
                dto.rider = AssignedRiderRead(
                    rider_id=rider.id,
                    rider_name=rider.name,
                    rider_email=rider.email,
                )
            result.append(dto)
        return result
