"""
Equipos de un grupo y tablero de dificultad.

GET /groups/{id}/teams pagina por cursor: next_cursor_id es el id del último
equipo devuelto y se reenvía como cursor para la página siguiente.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from designaciones.deps import get_teams_service
from designaciones.models import TeamCreate, TeamPage, TeamTierUpdate, TeamUpdate
from designaciones.services import TeamsService


router = APIRouter(tags=["teams"])

TeamsServiceDep = Annotated[TeamsService, Depends(get_teams_service)]


@router.get("/groups/{group_id}/teams", response_model=TeamPage)
def list_teams(
    group_id: str,
    service: TeamsServiceDep,
    search: Optional[str] = Query(None, description="Prefijo del nombre."),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    cursor: Optional[str] = Query(None, description="next_cursor_id de la página anterior."),
) -> TeamPage:
    return service.list_teams(group_id, search=search, page_size=page_size, cursor_id=cursor)


@router.post("/groups/{group_id}/teams", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_team(group_id: str, payload: TeamCreate, service: TeamsServiceDep) -> dict:
    return service.create_team(group_id, payload)


@router.get("/teams/{team_id}", response_model=dict)
def get_team(team_id: str, service: TeamsServiceDep) -> dict:
    return service.get_team(team_id)


@router.put("/teams/{team_id}", response_model=dict)
def update_team(team_id: str, payload: TeamUpdate, service: TeamsServiceDep) -> dict:
    return service.update_team(team_id, payload)


@router.put("/teams/{team_id}/tier", response_model=dict)
def set_team_tier(team_id: str, payload: TeamTierUpdate, service: TeamsServiceDep) -> dict:
    return service.set_tier(team_id, payload.tier)


@router.delete("/teams/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team(team_id: str, service: TeamsServiceDep) -> None:
    service.delete_team(team_id)
