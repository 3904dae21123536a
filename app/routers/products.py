# app/routers/products.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.errors import ProductNotFoundError
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductRead

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()


# -------- Public, read-only endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List catalog products.
    """
    return repo.list(session, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single product by id.
    """
    product = repo.get_by_id(session, product_id)
    if product is None:
        raise ProductNotFoundError()
    return product
