# app/repositories/cart_repo.py
import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone

from sqlalchemy import delete, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.errors import CartError, ItemNotFoundError, PersistenceError
from app.models.cart import ACTIVE_CART_PREDICATE, Cart, CartItem, CartStatus
from app.schemas.cart import CartItemState, CartState, ProductSnapshot
from app.services.cart_merge import CartChange, CartOperation, MergeResult

logger = logging.getLogger(__name__)


class CartRepository:
    """
    Data access layer for Cart & CartItem.

    - Reads return immutable CartState values, never ORM rows.
    - Writes are single statements the store executes atomically
      (insert-if-absent, increment-or-insert, conditional update/delete),
      so concurrent requests for the same user never lose an update.
    - Each save is one transaction: committed whole or rolled back.
    """

    # ----- Reads -----

    def find_active_cart(
        self, session: Session, user_id: uuid.UUID
    ) -> CartState | None:
        stmt = select(Cart).where(
            Cart.user_id == user_id, Cart.status == CartStatus.ACTIVE.value
        )
        cart = session.exec(stmt).first()
        if cart is None:
            return None
        return self._to_state(cart, self._items_for(session, cart.id))

    def get_by_id(self, session: Session, cart_id: uuid.UUID) -> CartState | None:
        cart = session.get(Cart, cart_id)
        if cart is None:
            return None
        return self._to_state(cart, self._items_for(session, cart.id))

    def list_all(self, session: Session) -> list[CartState]:
        """Every cart in the store, any owner, any status. Unbounded."""
        carts = session.exec(select(Cart).order_by(Cart.created_at)).all()
        rows = session.exec(select(CartItem).order_by(CartItem.id)).all()

        by_cart: dict[uuid.UUID, list[CartItem]] = defaultdict(list)
        for row in rows:
            by_cart[row.cart_id].append(row)

        return [self._to_state(cart, by_cart[cart.id]) for cart in carts]

    # ----- Writes -----

    def save(self, session: Session, result: MergeResult) -> CartState:
        """
        Persist a merge result and return the cart as stored.

        A cart without id is attached to the user's active cart, creating
        it if needed (assigns id and created_at). The returned value is
        re-read after commit, so it includes concurrent merges.
        """
        try:
            cart_id = result.cart.id or self._get_or_create_active(
                session, result.cart
            )
            self._apply_change(session, cart_id, result.change)
            session.execute(
                update(Cart)
                .where(Cart.id == cart_id)
                .values(updated_at=result.cart.updated_at or _utcnow())
            )
            session.commit()
        except CartError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Cart save failed for user %s: %s", result.cart.user_id, exc)
            raise PersistenceError() from exc
        except Exception:
            session.rollback()
            raise

        saved = self.get_by_id(session, cart_id)
        if saved is None:
            raise PersistenceError("Cart vanished after save")
        return saved

    # ----- Helpers -----

    @staticmethod
    def _insert(session: Session, table):
        if session.get_bind().dialect.name == "postgresql":
            return pg_insert(table)
        return sqlite_insert(table)

    def _get_or_create_active(self, session: Session, cart: CartState) -> uuid.UUID:
        """
        Find-or-create on (user_id, status='active').

        The insert is a no-op when another request already created the
        active cart, so a creation race always ends with one row.
        """
        now = cart.updated_at or _utcnow()
        stmt = (
            self._insert(session, Cart.__table__)
            .values(
                id=uuid.uuid4(),
                user_id=cart.user_id,
                status=CartStatus.ACTIVE.value,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(
                index_elements=["user_id"],
                index_where=text(ACTIVE_CART_PREDICATE),
            )
        )
        session.execute(stmt)

        cart_id = session.exec(
            select(Cart.id).where(
                Cart.user_id == cart.user_id,
                Cart.status == CartStatus.ACTIVE.value,
            )
        ).one()
        logger.info("Using active cart %s for user %s", cart_id, cart.user_id)
        return cart_id

    def _apply_change(
        self, session: Session, cart_id: uuid.UUID, change: CartChange
    ) -> None:
        op = change.operation

        if op is CartOperation.ADD:
            items = CartItem.__table__
            stmt = self._insert(session, items).values(
                cart_id=cart_id,
                product_id=change.product_id,
                quantity=change.quantity,
                product=change.item.product.to_document(),
                added_at=change.item.added_at,
            )
            # increment-or-insert; the snapshot always takes the new value
            stmt = stmt.on_conflict_do_update(
                index_elements=["cart_id", "product_id"],
                set_={
                    "quantity": items.c.quantity + stmt.excluded.quantity,
                    "product": stmt.excluded.product,
                },
            )
            session.execute(stmt)

        elif op is CartOperation.UPDATE_QUANTITY:
            res = session.execute(
                update(CartItem)
                .where(
                    CartItem.cart_id == cart_id,
                    CartItem.product_id == change.product_id,
                )
                .values(quantity=change.quantity)
            )
            if res.rowcount == 0:
                raise ItemNotFoundError()

        elif op is CartOperation.REMOVE:
            res = session.execute(
                delete(CartItem).where(
                    CartItem.cart_id == cart_id,
                    CartItem.product_id == change.product_id,
                )
            )
            if res.rowcount == 0:
                raise ItemNotFoundError()

        elif op is CartOperation.CLEAR:
            session.execute(delete(CartItem).where(CartItem.cart_id == cart_id))

    @staticmethod
    def _items_for(session: Session, cart_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.cart_id == cart_id)
            .order_by(CartItem.id)
        )
        return session.exec(stmt).all()

    @staticmethod
    def _to_state(cart: Cart, rows: list[CartItem]) -> CartState:
        items = tuple(
            CartItemState(
                product_id=row.product_id,
                product=ProductSnapshot.model_validate(row.product or {}),
                quantity=row.quantity,
                added_at=row.added_at,
            )
            for row in rows
            if row.quantity >= 1
        )
        return CartState(
            id=cart.id,
            user_id=cart.user_id,
            items=items,
            status=CartStatus(cart.status),
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
