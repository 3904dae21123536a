# app/models/product.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    The catalog is owned elsewhere; this service only reads it. Older
    rows carry `title` instead of `name`, so both columns exist and
    either may be empty.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str | None = Field(
        default=None,
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    title: str | None = Field(
        default=None,
        max_length=255,
        description="Legacy display name; alias of name",
    )

    description: str | None = None

    category: str | None = Field(default=None, max_length=50)

    brand: str | None = Field(default=None, max_length=100)

    price: float = Field(
        ge=0,
        description="Unit price",
    )

    rating: float | None = None

    discount_percentage: float | None = None

    stock: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    thumbnail: str | None = Field(
        default=None,
        description="Main thumbnail URL",
    )

    images: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
