# app/repositories/product_repo.py
import uuid

from sqlmodel import Session, select

from app.models.product import Product


class ProductRepository:
    """
    Read-only data access for the product catalog.

    - Pure DB queries, no FastAPI, no business logic.
    - The catalog is written by another system; nothing here mutates it.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_many(
        self, session: Session, product_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, Product]:
        """Batch lookup keyed by id; unknown ids are simply absent."""
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(set(product_ids)))
        return {p.id: p for p in session.exec(stmt).all()}

    def list(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Product]:
        stmt = select(Product).order_by(Product.created_at).offset(skip).limit(limit)
        return session.exec(stmt).all()
