# shopapi/schemas/rider.py
from datetime import datetime

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from shopapi.schemas.order import OrderItemRead, OrderRead


class RiderWrite(SQLModel):
    """
    Payload for creating or replacing a rider.

    Validation rules:
      - email must be a valid EmailStr (unique across riders)
      - name cannot be empty or whitespace
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    email: EmailStr

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class RiderRead(SQLModel):
    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class RiderWithCountRead(RiderRead):
    assigned_orders_count: int = 0


class RiderOrderRead(OrderRead):
    """
    An order as seen from a rider's assignment list.
    """

    user_email: str | None = None
    assigned_at: datetime
    rider_name: str
    rider_email: str
    items: list[OrderItemRead]
