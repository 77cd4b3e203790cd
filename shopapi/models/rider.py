# shopapi/models/rider.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Rider(SQLModel, table=True):
    """
    Delivery rider.
    """

    __tablename__ = "riders"

    id: int | None = Field(default=None, primary_key=True)

    name: str
    email: str = Field(unique=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderRider(SQLModel, table=True):
    """
    Rider assignment for an order.

    order_id is the primary key: an order has at most one rider, and
    reassignment rewrites rider_id on the existing row.
    """

    __tablename__ = "order_riders"

    order_id: int = Field(
        foreign_key="orders.id",
        ondelete="CASCADE",
        primary_key=True,
    )

    rider_id: int = Field(
        foreign_key="riders.id",
        index=True,
    )

    # Assignment time
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
