"""
Back-Office Backend: Dashboard Summary
========================================

Headline numbers for the landing screen, computed over the caller's read
scope (own rows, or every owner's rows for admins):

    appointments_today   appointments starting today (UTC)
    total_clients        client count
    revenue_today        sum of paid invoices created today
    pending_invoices     invoices still pending
    last_7_days          per-day paid revenue and appointment count,
                         oldest day first, ending today

Days are UTC calendar days. Grouping happens in Python so the same code
runs on PostgreSQL and SQLite.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.appointment import Appointment
from backoffice.models.client import Client
from backoffice.models.invoice import STATUS_PAID, STATUS_PENDING, Invoice
from backoffice.models.user import utcnow
from backoffice.schemas.dashboard import DailyPoint, DashboardResponse
from backoffice.services.access import Principal, readable
from backoffice.services.appointment_service import day_start
from backoffice.services.scheduling import as_utc

WINDOW_DAYS = 7


class DashboardService:

    async def _count(self, db: AsyncSession, principal: Principal, model, *criteria) -> int:
        query = readable(select(func.count()).select_from(model), model, principal)
        if criteria:
            query = query.where(*criteria)
        result = await db.execute(query)
        return result.scalar_one()

    async def summary(
        self, db: AsyncSession, principal: Principal, today: Optional[date] = None
    ) -> DashboardResponse:
        today = today or utcnow().date()
        first_day = today - timedelta(days=WINDOW_DAYS - 1)
        window_start = day_start(first_day)
        window_end = day_start(today + timedelta(days=1))

        appointments_per_day: Dict[date, int] = defaultdict(int)
        result = await db.execute(
            readable(select(Appointment.start_time), Appointment, principal).where(
                Appointment.start_time >= window_start,
                Appointment.start_time < window_end,
            )
        )
        for start_time in result.scalars().all():
            appointments_per_day[as_utc(start_time).date()] += 1

        revenue_per_day: Dict[date, Decimal] = defaultdict(Decimal)
        result = await db.execute(
            readable(select(Invoice.created_at, Invoice.amount), Invoice, principal).where(
                Invoice.status == STATUS_PAID,
                Invoice.created_at >= window_start,
                Invoice.created_at < window_end,
            )
        )
        for created_at, amount in result.all():
            revenue_per_day[as_utc(created_at).date()] += Decimal(amount)

        series = [
            DailyPoint(
                day=day,
                revenue=revenue_per_day.get(day, Decimal("0")),
                appointments=appointments_per_day.get(day, 0),
            )
            for day in (first_day + timedelta(days=offset) for offset in range(WINDOW_DAYS))
        ]

        return DashboardResponse(
            today=today,
            appointments_today=appointments_per_day.get(today, 0),
            total_clients=await self._count(db, principal, Client),
            revenue_today=revenue_per_day.get(today, Decimal("0")),
            pending_invoices=await self._count(
                db, principal, Invoice, Invoice.status == STATUS_PENDING
            ),
            last_7_days=series,
        )


dashboard_service = DashboardService()
