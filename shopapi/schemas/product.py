# shopapi/schemas/product.py
from datetime import datetime

from pydantic import ConfigDict, StrictInt, field_validator
from sqlmodel import SQLModel, Field


class ProductWrite(SQLModel):
    """
    Payload for creating or replacing a product (POST / PUT).

    - name and price are required
    - price is an integer amount in minor currency units
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str | None = None
    price: StrictInt = Field(ge=0)
    image: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("image", "description")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class VariantWrite(SQLModel):
    """
    Payload for creating or replacing a product variant.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    color: str | None = None
    size: str | None = None
    price: StrictInt = Field(ge=0)
    stock: StrictInt = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class VariantRead(SQLModel):
    id: int
    product_id: int
    name: str
    color: str | None
    size: str | None
    price: int
    stock: int
    created_at: datetime
    updated_at: datetime


class ProductRead(SQLModel):
    """
    Product representation for clients, always with its variants.
    """

    id: int
    name: str
    description: str | None
    price: int
    image: str | None
    created_at: datetime
    updated_at: datetime
    variants: list[VariantRead] = []
