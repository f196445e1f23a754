from __future__ import annotations

from fastapi import APIRouter, Depends

from termslens.analysis.models import RateGateStatus
from termslens.api.dependencies import AnalysisServices, get_services

router = APIRouter(tags=["status"])


@router.get("/rate-gate", response_model=RateGateStatus)
async def rate_gate_status(services: AnalysisServices = Depends(get_services)) -> RateGateStatus:
    """Request counters of the shared gate. The daily figure is advisory."""
    return services.gate.status()
