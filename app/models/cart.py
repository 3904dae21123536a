# app/models/cart.py
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import JSON, CheckConstraint, Column, Index, UniqueConstraint, text
from sqlmodel import SQLModel, Field


class CartStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


# Shared by the partial unique index and the find-or-create upsert.
ACTIVE_CART_PREDICATE = "status = 'active'"


class Cart(SQLModel, table=True):
    """
    Shopping cart header.

    A user has at most one row with status='active'. The partial unique
    index below backs the repository's insert-if-absent on (user_id, active).
    Completed/abandoned carts stay in the table and are ignored when
    resolving a user's cart.
    """

    __tablename__ = "carts"
    __table_args__ = (
        Index(
            "uq_carts_one_active_per_user",
            "user_id",
            unique=True,
            postgresql_where=text(ACTIVE_CART_PREDICATE),
            sqlite_where=text(ACTIVE_CART_PREDICATE),
        ),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # Plain string column so the index predicate can match on the value.
    status: str = Field(
        default=CartStatus.ACTIVE.value,
        max_length=20,
        description="active | completed | abandoned",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Refreshed on every mutation",
    )


class CartItem(SQLModel, table=True):
    """
    Shopping cart entry.

    One cart cannot have 2 rows for the same product; quantity is always
    >= 1. `product` is the snapshot of display data taken when the item
    was last added. The integer id keeps insertion order.
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )

    id: int | None = Field(default=None, primary_key=True)

    cart_id: uuid.UUID = Field(
        foreign_key="carts.id",
        index=True,
    )

    # No FK: supplied snapshots may reference products not mirrored locally.
    product_id: uuid.UUID = Field(index=True)

    quantity: int = Field(
        description="Must be >= 1",
    )

    product: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    added_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
