# app/schemas/product.py
import uuid
from datetime import datetime

from app.schemas.cart import CamelModel


class ProductRead(CamelModel):
    """
    Read model for a catalog product.
    """

    id: uuid.UUID
    name: str | None = None
    title: str | None = None
    description: str | None = None
    category: str | None = None
    brand: str | None = None
    price: float
    rating: float | None = None
    discount_percentage: float | None = None
    stock: int = 0
    thumbnail: str | None = None
    images: list[str] = []
    created_at: datetime
