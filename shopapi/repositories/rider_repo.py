# shopapi/repositories/rider_repo.py
from datetime import datetime, timezone

from sqlalchemy import func
from sqlmodel import Session, select

from shopapi.models.order import Order
from shopapi.models.rider import OrderRider, Rider
from shopapi.models.user import User


class RiderRepository:
    """
    Data access layer for riders and order_riders (assignments).

    No commits here; the service decides transaction boundaries.
    """

    # ----- Riders -----

    def get_by_id(self, session: Session, rider_id: int) -> Rider | None:
        return session.get(Rider, rider_id)

    def get_by_email(self, session: Session, email: str) -> Rider | None:
        stmt = select(Rider).where(Rider.email == email)
        return session.exec(stmt).first()

    def list_riders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Rider]:
        stmt = select(Rider).order_by(Rider.name, Rider.id).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def add(self, session: Session, rider: Rider) -> Rider:
        session.add(rider)
        session.flush()
        session.refresh(rider)
        return rider

    def delete(self, session: Session, rider: Rider) -> None:
        session.delete(rider)
        session.flush()

    # ----- Assignments -----

    def get_assignment(self, session: Session, order_id: int) -> OrderRider | None:
        return session.get(OrderRider, order_id)

    def list_assignments_for_orders(
        self,
        session: Session,
        order_ids: list[int],
    ) -> list[tuple[OrderRider, Rider]]:
        if not order_ids:
            return []
        stmt = (
            select(OrderRider, Rider)
            .join(Rider, OrderRider.rider_id == Rider.id)
            .where(OrderRider.order_id.in_(order_ids))
        )
        return session.exec(stmt).all()

    def has_assignments(self, session: Session, rider_id: int) -> bool:
        stmt = select(OrderRider).where(OrderRider.rider_id == rider_id).limit(1)
        return session.exec(stmt).first() is not None

    def count_assignments(
        self,
        session: Session,
        rider_ids: list[int],
    ) -> dict[int, int]:
        """
        Map rider_id -> number of assigned orders (riders with none are absent).
        """
        if not rider_ids:
            return {}
        stmt = (
            select(OrderRider.rider_id, func.count(OrderRider.order_id))
            .where(OrderRider.rider_id.in_(rider_ids))
            .group_by(OrderRider.rider_id)
        )
        return {rider_id: int(count) for rider_id, count in session.exec(stmt).all()}

    def assign(self, session: Session, order_id: int, rider_id: int) -> OrderRider:
        """
        Create the order's assignment, or point the existing one at a new rider.
        """
        now = datetime.now(timezone.utc)
        assignment = self.get_assignment(session, order_id)
        if assignment is None:
            assignment = OrderRider(order_id=order_id, rider_id=rider_id)
        elif assignment.rider_id != rider_id:
            assignment.rider_id = rider_id
            assignment.created_at = now
        assignment.updated_at = now

        session.add(assignment)
        session.flush()
        session.refresh(assignment)
        return assignment

    def list_orders_for_rider(
        self,
        session: Session,
        rider_id: int,
    ) -> list[tuple[Order, str, datetime]]:
        """
        Orders assigned to a rider, newest first, with customer email
        and assignment time.
        """
        stmt = (
            select(Order, User.email, OrderRider.created_at)
            .select_from(OrderRider)
            .join(Order, OrderRider.order_id == Order.id)
            .join(User, Order.user_id == User.id)
            .where(OrderRider.rider_id == rider_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return session.exec(stmt).all()
