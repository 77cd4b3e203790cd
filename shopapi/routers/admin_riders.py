# shopapi/routers/admin_riders.py
from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from shopapi.core.auth import require_admin
from shopapi.database import get_session
from shopapi.repositories.order_repo import OrderRepository
from shopapi.repositories.rider_repo import RiderRepository
from shopapi.schemas.rider import (
    RiderOrderRead,
    RiderRead,
    RiderWithCountRead,
    RiderWrite,
)
from shopapi.services.rider_service import RiderService

router = APIRouter(
    prefix="/admin/riders",
    tags=["Admin Riders"],
    dependencies=[Depends(require_admin)],
)

service = RiderService(RiderRepository(), OrderRepository())


@router.get("", response_model=list[RiderWithCountRead])
def list_riders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 100,
):
    """
    List riders (by name) with their assigned order counts.
    """
    return service.list_riders(session, skip, limit)


@router.post(
    "",
    response_model=RiderRead,
    status_code=status.HTTP_201_CREATED,
)
def create_rider(
    payload: RiderWrite,
    session: Session = Depends(get_session),
):
    """
    Create a rider. Emails are unique.
    """
    return service.create_rider(session, payload)


@router.get("/{rider_id}", response_model=RiderWithCountRead)
def get_rider(
    rider_id: int,
    session: Session = Depends(get_session),
):
    return service.get_rider(session, rider_id)


@router.put("/{rider_id}", response_model=RiderRead)
def update_rider(
    rider_id: int,
    payload: RiderWrite,
    session: Session = Depends(get_session),
):
    return service.update_rider(session, rider_id, payload)


@router.get("/{rider_id}/orders", response_model=list[RiderOrderRead])
def list_rider_orders(
    rider_id: int,
    session: Session = Depends(get_session),
):
    """
    Orders currently assigned to a rider.
    """
    return service.list_rider_orders(session, rider_id)


@router.delete("/{rider_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rider(
    rider_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a rider. Refused (409) while the rider has assigned orders.
    """
    service.delete_rider(session, rider_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
