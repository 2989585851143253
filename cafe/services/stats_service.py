from datetime import datetime, time, timedelta, timezone

from sqlmodel import Session

from cafe.repositories.stats_repo import StatsRepository
from cafe.schemas.stats import SalesStats

# Orders counted as sales: the café has started working on them
SALES_STATUSES = ["preparing", "ready", "served"]


class StatsService:
    """
    Orchestrates the admin dashboard sales summary.
    """

    def __init__(self, repo: StatsRepository, utc_offset_hours: float = 8.0):
        self.repo = repo
        self.local_tz = timezone(timedelta(hours=utc_offset_hours))

    def start_of_today(self, now: datetime | None = None) -> datetime:
        """
        Midnight of the café's current local day, in UTC
        (the form created_at is stored in).
        """
        now = now or datetime.now(timezone.utc)
        local_midnight = datetime.combine(
            now.astimezone(self.local_tz).date(), time.min, tzinfo=self.local_tz
        )
        return local_midnight.astimezone(timezone.utc)

    def get_sales_stats(self, session: Session, now: datetime | None = None) -> SalesStats:
        return SalesStats(
            total_sales=self.repo.total_sales(session, SALES_STATUSES),
            total_orders=self.repo.count_orders(session, SALES_STATUSES),
            today_sales=self.repo.total_sales(
                session, SALES_STATUSES, since=self.start_of_today(now)
            ),
        )
