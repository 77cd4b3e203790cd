# shopapi/models/order.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order.

    Status lifecycle:
      Paid -> Shipped -> Delivered | Undelivered
    """

    __tablename__ = "orders"

    id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    # Claimed by the client at checkout, minor currency units
    total: int = Field(gt=0)

    # Paid | Shipped | Delivered | Undelivered
    status: str = Field(
        default="Paid",
        index=True,
        description="Order status lifecycle",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last status change (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    `price` is the unit price captured when the order was placed
    (variant price if a variant was chosen, product price otherwise).
    It is never rewritten afterwards.
    """

    __tablename__ = "order_items"

    id: int | None = Field(default=None, primary_key=True)

    order_id: int = Field(
        foreign_key="orders.id",
        ondelete="CASCADE",
        index=True,
    )

    product_id: int = Field(
        foreign_key="products.id",
        ondelete="CASCADE",
        index=True,
    )

    variant_id: int | None = Field(
        default=None,
        foreign_key="product_variants.id",
        ondelete="SET NULL",
        nullable=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price: int = Field(
        description="Unit price at time of order",
    )
