# shopapi/models/product.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Catalog entry.

    Prices are integer minor-currency units.
    """

    __tablename__ = "products"

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: int = Field(
        ge=0,
        description="Unit price in minor currency units",
    )

    image: str | None = Field(
        default=None,
        description="Public image URL",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class ProductVariant(SQLModel, table=True):
    """
    Purchasable configuration (color / size) of a product.

    Removed together with its product (ON DELETE CASCADE).
    """

    __tablename__ = "product_variants"

    id: int | None = Field(default=None, primary_key=True)

    product_id: int = Field(
        foreign_key="products.id",
        ondelete="CASCADE",
        index=True,
        description="FK to products.id",
    )

    name: str
    color: str | None = None
    size: str | None = None

    price: int = Field(
        ge=0,
        description="Variant unit price in minor currency units",
    )

    # Informational only; orders never decrement it
    stock: int = Field(default=0, ge=0)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
