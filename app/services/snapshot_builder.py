# app/services/snapshot_builder.py
import logging
import uuid
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session

from app.core.errors import ProductNotFoundError
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CatalogSnapshot, ProductSnapshot, SuppliedSnapshot

logger = logging.getLogger(__name__)


class ProductSnapshotBuilder:
    """
    Builds the display snapshot stored with a cart item.

    Two sources:
      - caller-supplied data (e.g. entries from an external feed that are
        not mirrored in the local catalog), trusted as-is when well-formed
      - the local catalog, looked up by id
    """

    def __init__(self, product_repo: ProductRepository):
        self.product_repo = product_repo

    def build(
        self,
        session: Session,
        product_id: uuid.UUID,
        supplied: Any = None,
    ) -> ProductSnapshot:
        """
        Raises:
            ProductNotFoundError: no usable supplied data and the catalog
            has no such product.
        """
        if supplied is not None:
            snapshot = self._from_supplied(supplied)
            if snapshot is not None:
                return snapshot
            logger.warning(
                "Ignoring malformed product data for %s; using catalog", product_id
            )

        product = self.product_repo.get_by_id(session, product_id)
        if product is None:
            raise ProductNotFoundError()
        return self.from_catalog(product)

    @staticmethod
    def _from_supplied(supplied: Any) -> SuppliedSnapshot | None:
        if not isinstance(supplied, dict):
            return None
        try:
            return SuppliedSnapshot.model_validate(supplied)
        except PydanticValidationError:
            return None

    @staticmethod
    def from_catalog(product: Product) -> CatalogSnapshot:
        # name and title are aliases: whichever is set fills both
        return CatalogSnapshot(
            id=str(product.id),
            name=product.name or product.title,
            title=product.title or product.name,
            thumbnail=product.thumbnail,
            price=product.price,
            brand=product.brand,
            description=product.description,
            rating=product.rating,
            discount_percentage=product.discount_percentage,
            stock=product.stock,
        )
