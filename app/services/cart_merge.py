# app/services/cart_merge.py
"""
Pure cart merge rules.

Every function takes the current cart value (or None) and returns a
MergeResult: the new cart value plus the item-level change the
repository must persist. Nothing here touches the database or the clock
except through the optional `now` argument.

Rules:
  - add merges by addition and replaces the stored snapshot (last write
    wins, even when the snapshot did not change)
  - update_quantity overwrites with the exact value (>= 1)
  - remove drops one item and keeps the order of the rest
  - clear empties the items, status untouched
  - every operation stamps updated_at; none changes status
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from app.core.errors import CartNotFoundError, ItemNotFoundError, ValidationError
from app.schemas.cart import CartItemState, CartState, ProductSnapshot

# largest quantity a cart_items row can hold (signed 32-bit INTEGER)
MAX_QUANTITY = 2**31 - 1


class CartOperation(str, Enum):
    ADD = "add"
    UPDATE_QUANTITY = "update_quantity"
    REMOVE = "remove"
    CLEAR = "clear"


@dataclass(frozen=True)
class CartChange:
    """
    Item-level mutation to persist.

    For ADD, `quantity` is the delta to add to whatever is stored; for
    UPDATE_QUANTITY it is the absolute value. REMOVE and CLEAR ignore it.
    """

    operation: CartOperation
    product_id: uuid.UUID | None = None
    quantity: int | None = None
    item: CartItemState | None = None


@dataclass(frozen=True)
class MergeResult:
    cart: CartState
    change: CartChange


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_quantity(value: Any, field: str = "quantity") -> int:
    """
    Turn a request quantity into a positive int.

    Accepts ints, integral floats and digit strings ("3"). Anything else,
    anything < 1 or anything above MAX_QUANTITY is a ValidationError;
    values are never clamped.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a positive integer")

    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} must be a positive integer")
        number = int(value)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw.lstrip("-").isdigit():
            raise ValidationError(f"{field} must be a positive integer")
        number = int(raw)
    else:
        raise ValidationError(f"{field} must be a positive integer")

    if number < 1:
        raise ValidationError(f"{field} must be at least 1")
    if number > MAX_QUANTITY:
        raise ValidationError(f"{field} must be at most {MAX_QUANTITY}")
    return number


def _require_cart(cart: CartState | None) -> CartState:
    if cart is None:
        raise CartNotFoundError()
    return cart


def _require_item(cart: CartState, product_id: uuid.UUID) -> CartItemState:
    item = cart.find_item(product_id)
    if item is None:
        raise ItemNotFoundError()
    return item


def add_item(
    cart: CartState | None,
    user_id: uuid.UUID,
    product_id: uuid.UUID,
    snapshot: ProductSnapshot,
    quantity_delta: Any,
    now: datetime | None = None,
) -> MergeResult:
    now = now or _utcnow()
    delta = coerce_quantity(quantity_delta)

    if cart is None:
        cart = CartState(user_id=user_id, items=(), updated_at=now)

    existing = cart.find_item(product_id)
    if existing is not None:
        if existing.quantity + delta > MAX_QUANTITY:
            raise ValidationError(f"quantity must be at most {MAX_QUANTITY}")
        merged = existing.model_copy(
            update={"quantity": existing.quantity + delta, "product": snapshot}
        )
        items = tuple(
            merged if it.product_id == product_id else it for it in cart.items
        )
    else:
        merged = CartItemState(
            product_id=product_id,
            product=snapshot,
            quantity=delta,
            added_at=now,
        )
        items = cart.items + (merged,)

    return MergeResult(
        cart=cart.model_copy(update={"items": items, "updated_at": now}),
        change=CartChange(
            operation=CartOperation.ADD,
            product_id=product_id,
            quantity=delta,
            item=merged,
        ),
    )


def update_quantity(
    cart: CartState | None,
    product_id: uuid.UUID,
    quantity: Any,
    now: datetime | None = None,
) -> MergeResult:
    now = now or _utcnow()
    value = coerce_quantity(quantity)
    cart = _require_cart(cart)
    item = _require_item(cart, product_id)

    updated = item.model_copy(update={"quantity": value})
    items = tuple(updated if it.product_id == product_id else it for it in cart.items)

    return MergeResult(
        cart=cart.model_copy(update={"items": items, "updated_at": now}),
        change=CartChange(
            operation=CartOperation.UPDATE_QUANTITY,
            product_id=product_id,
            quantity=value,
            item=updated,
        ),
    )


def remove_item(
    cart: CartState | None,
    product_id: uuid.UUID,
    now: datetime | None = None,
) -> MergeResult:
    now = now or _utcnow()
    cart = _require_cart(cart)
    _require_item(cart, product_id)

    items = tuple(it for it in cart.items if it.product_id != product_id)
    return MergeResult(
        cart=cart.model_copy(update={"items": items, "updated_at": now}),
        change=CartChange(operation=CartOperation.REMOVE, product_id=product_id),
    )


def clear(cart: CartState | None, now: datetime | None = None) -> MergeResult:
    now = now or _utcnow()
    cart = _require_cart(cart)
    return MergeResult(
        cart=cart.model_copy(update={"items": (), "updated_at": now}),
        change=CartChange(operation=CartOperation.CLEAR),
    )


def merge(
    cart: CartState | None,
    user_id: uuid.UUID,
    product_id: uuid.UUID | None,
    snapshot: ProductSnapshot | None,
    quantity_delta: Any,
    operation: CartOperation,
    now: datetime | None = None,
) -> MergeResult:
    """Single entry point dispatching on the operation."""
    if operation is CartOperation.ADD:
        if snapshot is None:
            raise ValidationError("product snapshot is required to add an item")
        return add_item(cart, user_id, product_id, snapshot, quantity_delta, now)
    if operation is CartOperation.UPDATE_QUANTITY:
        return update_quantity(cart, product_id, quantity_delta, now)
    if operation is CartOperation.REMOVE:
        return remove_item(cart, product_id, now)
    if operation is CartOperation.CLEAR:
        return clear(cart, now)
    raise ValidationError(f"unsupported cart operation: {operation}")
