"""
CRUD de árbitros. El listado incluye rcs_central calculado desde el tier.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status

from designaciones.deps import get_referees_service
from designaciones.models import RefereeCreate, RefereeUpdate, RefStatus
from designaciones.services import RefereesService


router = APIRouter(prefix="/referees", tags=["referees"])

RefereesServiceDep = Annotated[RefereesService, Depends(get_referees_service)]


@router.get("", response_model=List[dict])
def list_referees(
    service: RefereesServiceDep,
    status_filter: Optional[RefStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Texto contenido en el nombre."),
) -> List[dict]:
    return service.list_referees(status=status_filter.value if status_filter else None, search=search)


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_referee(payload: RefereeCreate, service: RefereesServiceDep) -> dict:
    return service.create_referee(payload)


@router.get("/{referee_id}", response_model=dict)
def get_referee(referee_id: str, service: RefereesServiceDep) -> dict:
    return service.get_referee(referee_id)


@router.put("/{referee_id}", response_model=dict)
def update_referee(referee_id: str, payload: RefereeUpdate, service: RefereesServiceDep) -> dict:
    return service.update_referee(referee_id, payload)
