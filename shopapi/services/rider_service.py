# shopapi/services/rider_service.py
import logging
from collections import defaultdict
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from shopapi.database import atomic
from shopapi.models.rider import Rider
from shopapi.repositories.order_repo import OrderRepository
from shopapi.repositories.rider_repo import RiderRepository
from shopapi.schemas.order import OrderItemRead
from shopapi.schemas.rider import RiderOrderRead, RiderWithCountRead, RiderWrite

logger = logging.getLogger(__name__)


class RiderService:
    """
    Business logic for riders (admin only).

    Responsibilities:
      - unique rider emails
      - assignment counts and per-rider order lists
      - refuse deleting a rider that still has assigned orders
    """

    def __init__(self, repo: RiderRepository, order_repo: OrderRepository):
        self.repo = repo
        self.order_repo = order_repo

    def _get_or_404(self, session: Session, rider_id: int) -> Rider:
        rider = self.repo.get_by_id(session, rider_id)
        if not rider:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Rider not found",
            )
        return rider

    def _ensure_email_free(
        self,
        session: Session,
        email: str,
        rider_id: int | None = None,
    ) -> None:
        existing = self.repo.get_by_email(session, email)
        if existing is not None and existing.id != rider_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A rider with this email already exists",
            )

    def list_riders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
    ) -> list[RiderWithCountRead]:
        """
        Riders ordered by name, each with its number of assigned orders.
        """
        riders = self.repo.list_riders(session, skip, limit)
        counts = self.repo.count_assignments(session, [r.id for r in riders])
        return [
            RiderWithCountRead.model_validate(
                r, update={"assigned_orders_count": counts.get(r.id, 0)}
            )
            for r in riders
        ]

    def get_rider(self, session: Session, rider_id: int) -> RiderWithCountRead:
        rider = self._get_or_404(session, rider_id)
        counts = self.repo.count_assignments(session, [rider.id])
        return RiderWithCountRead.model_validate(
            rider, update={"assigned_orders_count": counts.get(rider.id, 0)}
        )

    def create_rider(self, session: Session, payload: RiderWrite) -> Rider:
        self._ensure_email_free(session, payload.email)
        with atomic(session):
            rider = self.repo.add(session, Rider(name=payload.name, email=payload.email))
        session.refresh(rider)
        return rider

    def update_rider(
        self,
        session: Session,
        rider_id: int,
        payload: RiderWrite,
    ) -> Rider:
        rider = self._get_or_404(session, rider_id)
        self._ensure_email_free(session, payload.email, rider_id=rider.id)

        with atomic(session):
            rider.name = payload.name
            rider.email = payload.email
            rider.updated_at = datetime.now(timezone.utc)
            self.repo.add(session, rider)

        session.refresh(rider)
        return rider

    def delete_rider(self, session: Session, rider_id: int) -> None:
        """
        Delete a rider with no assigned orders.

        Raises:
            HTTPException(404): unknown rider.
            HTTPException(409): rider still has assigned orders.
        """
        rider = self._get_or_404(session, rider_id)

        if self.repo.has_assignments(session, rider.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete rider with assigned orders. Reassign orders first.",
            )

        with atomic(session):
            self.repo.delete(session, rider)
        logger.info("Deleted rider %s", rider_id)

    def list_rider_orders(self, session: Session, rider_id: int) -> list[RiderOrderRead]:
        """
        Orders assigned to a rider, newest first, with their raw items.
        """
        rider = self._get_or_404(session, rider_id)
        rows = self.repo.list_orders_for_rider(session, rider.id)

        items = self.order_repo.list_items_for_orders(
            session, [order.id for order, _, _ in rows]
        )
        items_by_order: dict[int, list[OrderItemRead]] = defaultdict(list)
        for item in items:
            items_by_order[item.order_id].append(OrderItemRead.model_validate(item))

        return [
            RiderOrderRead.model_validate(
                order,
                update={
                    "user_email": user_email,
                    "assigned_at": assigned_at,
                    "rider_name": rider.name,
                    "rider_email": rider.email,
                    "items": items_by_order.get(order.id, []),
                },
            )
            for order, user_email, assigned_at in rows
        ]
