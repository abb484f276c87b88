"""Dashboard summary schemas."""

from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


class DailyPoint(BaseModel):
    day: date
    revenue: Decimal = Decimal("0")
    appointments: int = 0


class DashboardResponse(BaseModel):
    today: date
    appointments_today: int
    total_clients: int
    revenue_today: Decimal = Field(description="Sum of paid invoices created today")
    pending_invoices: int
    last_7_days: List[DailyPoint] = Field(description="Oldest day first, ending today")
