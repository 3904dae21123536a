# app/routers/cart.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin, require_user
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.schemas.cart import AddItemRequest, CartRead, UpdateQuantityRequest
from app.schemas.common import ApiResponse
from app.services.cart_service import CartService

router = APIRouter(tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
user_repo = UserRepository()
service = CartService(cart_repo, product_repo, user_repo)


@router.post(
    "/cart/add",
    response_model=ApiResponse[CartRead],
    status_code=status.HTTP_201_CREATED,
)
def add_to_cart(
    payload: AddItemRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Add a product to the current user's cart.

    Body: {productId, quantity? (default 1), product? (display override)}
    """
    cart = service.add_item(
        session,
        current_user.id,
        payload.product_id,
        quantity=payload.quantity,
        product=payload.product,
    )
    return ApiResponse(message="Item added to cart successfully", data=cart)


@router.get("/cart", response_model=ApiResponse[CartRead])
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Get current user's active cart with totalItems.

    Returns an empty cart (200) when the user has none yet.
    """
    cart = service.get_cart(session, current_user.id)
    message = None if cart.items or cart.id else "Cart is empty"
    return ApiResponse(message=message, data=cart)


@router.put("/cart/update", response_model=ApiResponse[CartRead])
def update_cart_item(
    payload: UpdateQuantityRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Set the quantity of a product already in the cart (overwrite).
    """
    cart = service.update_quantity(
        session=session,
        user_id=current_user.id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )
    return ApiResponse(message="Cart updated successfully", data=cart)


@router.delete("/cart/remove/{product_id}", response_model=ApiResponse[CartRead])
def remove_cart_item(
    product_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Remove a product from the cart.
    """
    cart = service.remove_item(session, current_user.id, product_id)
    return ApiResponse(message="Item removed from cart successfully", data=cart)


@router.delete("/cart/clear", response_model=ApiResponse[CartRead])
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Remove every item from the cart. The cart itself stays active.
    """
    cart = service.clear_cart(session, current_user.id)
    return ApiResponse(message="Cart cleared successfully", data=cart)


@router.get("/carts", response_model=ApiResponse[list[CartRead]])
def list_all_carts(
    session: Session = Depends(get_session),
    _admin: User = Depends(require_admin),
):
    """
    Every cart in the store, any owner and status (admin diagnostics).

    Unpaginated; not meant for production traffic.
    """
    carts = service.list_all_carts(session)
    return ApiResponse(count=len(carts), data=carts)
