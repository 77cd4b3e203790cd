# shopapi/schemas/order.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, StrictInt
from sqlmodel import SQLModel, Field

OrderStatus = Literal["Paid", "Shipped", "Delivered", "Undelivered"]


class OrderItemCreate(SQLModel):
    """
    One requested line item. Ids and quantity must be real integers.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: StrictInt
    variant_id: StrictInt | None = None
    quantity: StrictInt = Field(gt=0)


class OrderCreate(SQLModel):
    """
    Checkout payload.

    User provides:
      - items (at least one)
      - total claimed by the storefront (minor currency units)

    Backend derives:
      - user_id from the token
      - status = 'Paid'
      - per-item price from the current catalog
    """

    model_config = ConfigDict(extra="forbid")

    items: list[OrderItemCreate] = Field(min_length=1)
    total: StrictInt = Field(gt=0)


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: int
    user_id: int
    total: int
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


class ItemProductRead(SQLModel):
    id: int
    name: str | None = None
    price: int | None = None
    image: str | None = None


class ItemVariantRead(SQLModel):
    id: int
    name: str | None = None
    color: str | None = None
    size: str | None = None
    price: int | None = None


class OrderItemRead(SQLModel):
    """
    A single order line item, optionally with product / variant details.
    """

    id: int
    order_id: int
    product_id: int
    variant_id: int | None
    quantity: int
    price: int
    product: ItemProductRead | None = None
    variant: ItemVariantRead | None = None


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class AssignedRiderRead(SQLModel):
    rider_id: int
    rider_name: str
    rider_email: str


class AdminOrderRead(OrderWithItemsRead):
    """
    Admin order view: customer email and current rider, if any.
    """

    user_email: str | None = None
    rider: AssignedRiderRead | None = None


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.

    rider_id is required when the target status is Shipped.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    rider_id: StrictInt | None = None


class OrderStatusRead(OrderRead):
    """
    Order after a status change, with its current rider (if any).
    """

    rider_id: int | None = None
    rider_name: str | None = None
    rider_email: str | None = None
