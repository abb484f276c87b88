"""Dashboard summary route."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db_session
from backoffice.dependencies import get_current_principal
from backoffice.schemas.dashboard import DashboardResponse
from backoffice.services.access import Principal
from backoffice.services.dashboard_service import dashboard_service

router = APIRouter(prefix="/api", tags=["Dashboard"])


@router.get("/dashboard", response_model=DashboardResponse, summary="Landing-screen summary")
async def get_dashboard(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> DashboardResponse:
    return await dashboard_service.summary(db, principal)
