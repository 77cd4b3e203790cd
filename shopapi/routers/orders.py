# shopapi/routers/orders.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from shopapi.core.auth import get_auth_context
from shopapi.database import get_session
from shopapi.repositories.order_repo import OrderRepository
from shopapi.repositories.product_repo import ProductRepository
from shopapi.repositories.rider_repo import RiderRepository
from shopapi.schemas.auth import AuthContext
from shopapi.schemas.order import OrderCreate, OrderWithItemsRead
from shopapi.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

service = OrderService(OrderRepository(), ProductRepository(), RiderRepository())


@router.post(
    "",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    ctx: AuthContext = Depends(get_auth_context),
):
    """
    Place an order for the authenticated user.

    Auth:
      - Any approved user.
    """
    return service.create_order(session, ctx, payload)


@router.get("", response_model=list[OrderWithItemsRead])
def list_my_orders(
    session: Session = Depends(get_session),
    ctx: AuthContext = Depends(get_auth_context),
    skip: int = 0,
    limit: int = 100,
):
    """
    List the authenticated user's orders with their items.
    """
    return service.list_user_orders(session, ctx, skip, limit)
