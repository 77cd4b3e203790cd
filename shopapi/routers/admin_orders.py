# shopapi/routers/admin_orders.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from shopapi.core.auth import require_admin
from shopapi.database import get_session
from shopapi.repositories.order_repo import OrderRepository
from shopapi.repositories.product_repo import ProductRepository
from shopapi.repositories.rider_repo import RiderRepository
from shopapi.schemas.order import AdminOrderRead, OrderStatusRead, OrderStatusUpdate
from shopapi.services.order_service import OrderService

router = APIRouter(
    prefix="/admin/orders",
    tags=["Admin Orders"],
    dependencies=[Depends(require_admin)],
)

service = OrderService(OrderRepository(), ProductRepository(), RiderRepository())


@router.get("", response_model=list[AdminOrderRead])
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 100,
):
    """
    List all orders with customer email, items and rider (admin only).
    """
    return service.list_all_orders(session, skip, limit)


@router.get("/{order_id}", response_model=AdminOrderRead)
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
):
    """
    Get any order with items and rider (admin only).
    """
    return service.get_order_admin(session, order_id)


@router.patch("/{order_id}/status", response_model=OrderStatusRead)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status (admin only).

      Paid    -> Shipped (rider_id required)

      Shipped -> Shipped (rider_id required, reassigns the rider)

      Shipped -> Delivered, Undelivered

    """
    return service.update_status(session, order_id, payload)
