from pydantic import ConfigDict
from sqlmodel import SQLModel


class SalesStats(SQLModel):
    """
    Admin dashboard sales summary.

    Only orders the café has started working on (preparing, ready,
    served) count as sales.
    """
    model_config = ConfigDict(extra="forbid")

    total_sales: float
    total_orders: int
    today_sales: float


class HistoryClearResult(SQLModel):
    deleted_orders: int
