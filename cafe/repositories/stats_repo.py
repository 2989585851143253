from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from cafe.models.order import Order


class StatsRepository:
    """
    Read-only aggregated queries for the admin dashboard.
    """

    def count_orders(self, session: Session, statuses: Iterable[str]) -> int:
        stmt = (
            select(func.count())
            .select_from(Order)
            .where(Order.status.in_(list(statuses)))
        )
        value = session.exec(stmt).one()
        return int(value or 0)

    def total_sales(
        self,
        session: Session,
        statuses: Iterable[str],
        since: datetime | None = None,
    ) -> float:
        """
        Sum of total_amount for orders in `statuses`, optionally only
        those created at or after `since`.
        """
        stmt = (
            select(func.coalesce(func.sum(Order.total_amount), 0.0))
            .where(Order.status.in_(list(statuses)))
        )
        if since is not None:
            stmt = stmt.where(Order.created_at >= since)
        value = session.exec(stmt).one()
        return float(value or 0.0)
