"""
CRUD de ligas (tbl leagues) y de sus grupos (tbl groups).

Multi-tenant: los repositorios llegan filtrados por el delegado efectivo
del request; crear exige un delegado concreto.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status

from designaciones.deps import get_leagues_service
from designaciones.models import GroupCreate, GroupUpdate, LeagueCreate, LeagueStatus, LeagueUpdate
from designaciones.services import LeaguesService


router = APIRouter(tags=["leagues"])

LeaguesServiceDep = Annotated[LeaguesService, Depends(get_leagues_service)]


@router.get("/leagues", response_model=List[dict])
def list_leagues(
    service: LeaguesServiceDep,
    status_filter: Optional[LeagueStatus] = Query(None, alias="status", description="ACTIVE o ARCHIVED."),
    search: Optional[str] = Query(None, description="Busca en nombre, slug y temporada."),
) -> List[dict]:
    return service.list_leagues(status=status_filter.value if status_filter else None, search=search)


@router.post("/leagues", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_league(payload: LeagueCreate, service: LeaguesServiceDep) -> dict:
    return service.create_league(payload)


@router.get("/leagues/{league_id}", response_model=dict)
def get_league(league_id: str, service: LeaguesServiceDep) -> dict:
    return service.get_league(league_id)


@router.put("/leagues/{league_id}", response_model=dict)
def update_league(league_id: str, payload: LeagueUpdate, service: LeaguesServiceDep) -> dict:
    return service.update_league(league_id, payload)


@router.delete("/leagues/{league_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_league(league_id: str, service: LeaguesServiceDep) -> None:
    """Solo se borra una liga sin grupos (409 si tiene)."""
    service.delete_league(league_id)


# ----- Grupos -----


@router.get("/leagues/{league_id}/groups", response_model=List[dict])
def list_groups(league_id: str, service: LeaguesServiceDep) -> List[dict]:
    return service.list_groups(league_id)


@router.post("/leagues/{league_id}/groups", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_group(league_id: str, payload: GroupCreate, service: LeaguesServiceDep) -> dict:
    return service.create_group(league_id, payload)


@router.get("/groups/{group_id}", response_model=dict)
def get_group(group_id: str, service: LeaguesServiceDep) -> dict:
    return service.get_group(group_id)


@router.put("/groups/{group_id}", response_model=dict)
def update_group(group_id: str, payload: GroupUpdate, service: LeaguesServiceDep) -> dict:
    return service.update_group(group_id, payload)


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(group_id: str, service: LeaguesServiceDep) -> None:
    service.delete_group(group_id)
