# app/services/cart_service.py
import logging
import uuid
from typing import Any

from sqlmodel import Session

from app.core.errors import CartNotFoundError, ItemNotFoundError, ValidationError
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.schemas.cart import (
    CartItemRead,
    CartRead,
    CartState,
    CatalogProductRef,
    OwnerRef,
)
from app.services import cart_merge
from app.services.snapshot_builder import ProductSnapshotBuilder

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - validate request shape before any store access
      - build the product snapshot (add path only)
      - load the active cart, run the merge rules, persist the result
      - resolve live catalog/owner fields and totalItems for display

    Failures are raised as app.core.errors exceptions; the HTTP layer
    maps them to status codes.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        user_repo: UserRepository,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.user_repo = user_repo
        self.snapshots = ProductSnapshotBuilder(product_repo)

    # ---- internal helpers ----

    @staticmethod
    def _parse_product_id(raw: Any) -> uuid.UUID:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise ValidationError("ProductId is required")
        if isinstance(raw, uuid.UUID):
            return raw
        if not isinstance(raw, str):
            raise ValidationError("ProductId must be a string")
        try:
            return uuid.UUID(raw.strip())
        except ValueError:
            raise ValidationError("ProductId is malformed")

    def _to_read(self, session: Session, cart: CartState) -> CartRead:
        products = self.product_repo.get_many(
            session, [it.product_id for it in cart.items]
        )
        return self._build_read(cart, products)

    @staticmethod
    def _build_read(
        cart: CartState, products: dict, owner: OwnerRef | None = None
    ) -> CartRead:
        items = []
        for it in cart.items:
            live = products.get(it.product_id)
            items.append(
                CartItemRead(
                    product_id=it.product_id,
                    product=it.product,
                    quantity=it.quantity,
                    added_at=it.added_at,
                    catalog_product=(
                        CatalogProductRef(
                            id=live.id, name=live.name or live.title, price=live.price
                        )
                        if live
                        else None
                    ),
                )
            )
        return CartRead(
            id=cart.id,
            user_id=cart.user_id,
            items=items,
            status=cart.status,
            total_items=cart.total_items,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
            owner=owner,
        )

    # ---- public operations ----

    def add_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: Any,
        quantity: Any = 1,
        product: Any = None,
    ) -> CartRead:
        """
        Add a product to the user's active cart, creating the cart if
        needed. Re-adding a product adds to its quantity and replaces its
        snapshot.
        """
        pid = self._parse_product_id(product_id)
        delta = cart_merge.coerce_quantity(1 if quantity is None else quantity)
        snapshot = self.snapshots.build(session, pid, product)

        existing = self.cart_repo.find_active_cart(session, user_id)
        result = cart_merge.add_item(existing, user_id, pid, snapshot, delta)
        saved = self.cart_repo.save(session, result)

        logger.info(
            "Added %s x%s to cart %s (user %s)", pid, delta, saved.id, user_id
        )
        return self._to_read(session, saved)

    def get_cart(self, session: Session, user_id: uuid.UUID) -> CartRead:
        """
        Return the active cart with totalItems. A user without a cart
        gets an empty active cart view, not an error.
        """
        cart = self.cart_repo.find_active_cart(session, user_id)
        if cart is None:
            return CartRead(user_id=user_id, items=[], total_items=0)
        return self._to_read(session, cart)

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: Any,
        quantity: Any,
    ) -> CartRead:
        """Set an item's quantity to the exact value given (>= 1)."""
        pid = self._parse_product_id(product_id)
        value = cart_merge.coerce_quantity(quantity)

        existing = self.cart_repo.find_active_cart(session, user_id)
        result = cart_merge.update_quantity(existing, pid, value)
        saved = self.cart_repo.save(session, result)
        return self._to_read(session, saved)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: Any,
    ) -> CartRead:
        """
        Drop one item. The id comes from the URL path, so an id that is not
        a product id at all simply matches no item.
        """
        existing = self.cart_repo.find_active_cart(session, user_id)
        if existing is None:
            raise CartNotFoundError()
        try:
            pid = self._parse_product_id(product_id)
        except ValidationError:
            raise ItemNotFoundError()

        result = cart_merge.remove_item(existing, pid)
        saved = self.cart_repo.save(session, result)
        return self._to_read(session, saved)

    def clear_cart(self, session: Session, user_id: uuid.UUID) -> CartRead:
        existing = self.cart_repo.find_active_cart(session, user_id)
        result = cart_merge.clear(existing)
        saved = self.cart_repo.save(session, result)
        return self._to_read(session, saved)

    def list_all_carts(self, session: Session) -> list[CartRead]:
        """
        Every cart in the store with product and owner fields resolved.

        No paging or filtering: operator diagnostics only.
        """
        carts = self.cart_repo.list_all(session)
        products = self.product_repo.get_many(
            session, [it.product_id for cart in carts for it in cart.items]
        )
        users = self.user_repo.get_many(session, [cart.user_id for cart in carts])

        reads = []
        for cart in carts:
            user = users.get(cart.user_id)
            owner = OwnerRef(id=cart.user_id, email=user.email if user else None)
            reads.append(self._build_read(cart, products, owner))
        return reads
