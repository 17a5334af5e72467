# Health router — liveness probe and root redirect.
# Created: 2026-10-19

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from playdeck.api.deps import Services, get_services
from playdeck.api.schemas import OkResponse

router = APIRouter(tags=["Health"])


@router.get("/", include_in_schema=False)
async def root(services: Services = Depends(get_services)):
    return RedirectResponse(services.settings.frontend_origin, status_code=302)


@router.get("/health", response_model=OkResponse)
async def health():
    return OkResponse()
