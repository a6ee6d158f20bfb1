from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_service
from .models import HealthResponse
from ..service import AuraService

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(service: Annotated[AuraService, Depends(get_service)]) -> HealthResponse:
    stats = service.stats()
    return HealthResponse(
        status="ok",
        documents=stats["documents"],
        chunks=stats["chunks"],
    )
