# app/schemas/cart.py
import uuid
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from app.models.cart import CartStatus


class CamelModel(BaseModel):
    """
    Base for every cart value that crosses the API boundary.

    Wire names are camelCase (productId, totalItems, ...); Python code
    keeps snake_case. Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---- product snapshots ----


class ProductSnapshot(CamelModel):
    """
    Point-in-time copy of a product's display data, embedded in a cart
    item. Never refreshed from the catalog after it is taken.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    name: str | None = None
    title: str | None = None
    thumbnail: str | None = None
    price: float | None = None
    brand: str | None = None
    description: str | None = None
    rating: float | None = None
    discount_percentage: float | None = None
    stock: int | None = None

    def to_document(self) -> dict[str, Any]:
        """Storage shape, identical for every snapshot source."""
        return self.model_dump(mode="json")


class SuppliedSnapshot(ProductSnapshot):
    """
    Display data supplied by the caller and trusted as-is.

    Well-formed means it can be shown on its own: a name (or title) and
    a price.
    """

    @model_validator(mode="after")
    def require_display_fields(self) -> "SuppliedSnapshot":
        if not (self.name or self.title):
            raise ValueError("supplied product needs a name or title")
        if self.price is None:
            raise ValueError("supplied product needs a price")
        return self


class CatalogSnapshot(ProductSnapshot):
    """Display data derived from the local catalog."""


# ---- cart state (immutable values the merge engine works on) ----


class CartItemState(CamelModel):
    model_config = ConfigDict(frozen=True)

    product_id: uuid.UUID
    product: ProductSnapshot
    quantity: int = Field(ge=1)
    added_at: datetime


class CartState(CamelModel):
    """
    A user's cart as a value. `id` and `created_at` stay None until the
    repository saves it for the first time.
    """

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID | None = None
    user_id: uuid.UUID
    items: tuple[CartItemState, ...] = ()
    status: CartStatus = CartStatus.ACTIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def find_item(self, product_id: uuid.UUID) -> CartItemState | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)


# ---- request payloads ----
# Loosely typed on purpose: shape problems are reported by the service as
# 400 ValidationError instead of FastAPI's 422.


class AddItemRequest(CamelModel):
    product_id: Any = None
    quantity: Any = 1
    product: Any = None


class UpdateQuantityRequest(CamelModel):
    product_id: Any = None
    quantity: Any = None


# ---- read models ----


class CatalogProductRef(CamelModel):
    """Live catalog fields resolved for display next to the snapshot."""

    id: uuid.UUID
    name: str | None = None
    price: float


class OwnerRef(CamelModel):
    id: uuid.UUID
    email: str | None = None


class CartItemRead(CamelModel):
    product_id: uuid.UUID
    product: ProductSnapshot
    quantity: int
    added_at: datetime
    catalog_product: CatalogProductRef | None = None


class CartRead(CamelModel):
    """
    Cart response model. `total_items` is recomputed from the items on
    every read, never stored.
    """

    id: uuid.UUID | None = None
    user_id: uuid.UUID
    items: list[CartItemRead] = []
    status: CartStatus = CartStatus.ACTIVE
    total_items: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    owner: OwnerRef | None = None
