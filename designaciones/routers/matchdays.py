"""
Jornadas, partidos, MDS por partido, sugerencias de árbitro y terna designada.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status

from designaciones.deps import get_assignments_service, get_matchdays_service, get_suggestions_service
from designaciones.models import (
    AssignmentResult,
    MatchCreate,
    MatchdayCreate,
    MatchdayUpdate,
    MatchMds,
    RefRole,
    SuggestionResult,
    TernaAssignment,
)
from designaciones.services import AssignmentsService, MatchdaysService, SuggestionsService


router = APIRouter(tags=["matchdays"])

MatchdaysServiceDep = Annotated[MatchdaysService, Depends(get_matchdays_service)]
SuggestionsServiceDep = Annotated[SuggestionsService, Depends(get_suggestions_service)]
AssignmentsServiceDep = Annotated[AssignmentsService, Depends(get_assignments_service)]


@router.get("/groups/{group_id}/matchdays", response_model=List[dict])
def list_matchdays(group_id: str, service: MatchdaysServiceDep) -> List[dict]:
    return service.list_matchdays(group_id)


@router.post("/groups/{group_id}/matchdays", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_matchday(group_id: str, payload: MatchdayCreate, service: MatchdaysServiceDep) -> dict:
    """Crea la siguiente jornada del grupo (number autoincremental)."""
    return service.create_matchday(group_id, payload)


@router.get("/matchdays/{matchday_id}", response_model=dict)
def get_matchday(matchday_id: str, service: MatchdaysServiceDep) -> dict:
    return service.get_matchday(matchday_id)


@router.put("/matchdays/{matchday_id}", response_model=dict)
def update_matchday(matchday_id: str, payload: MatchdayUpdate, service: MatchdaysServiceDep) -> dict:
    return service.update_matchday(matchday_id, payload)


@router.get("/matchdays/{matchday_id}/matches", response_model=List[dict])
def list_matches(matchday_id: str, service: MatchdaysServiceDep) -> List[dict]:
    return service.list_matches(matchday_id)


@router.post("/matchdays/{matchday_id}/matches", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_match(matchday_id: str, payload: MatchCreate, service: MatchdaysServiceDep) -> dict:
    return service.create_match(matchday_id, payload)


@router.get("/matches/{match_id}", response_model=dict)
def get_match(match_id: str, service: MatchdaysServiceDep) -> dict:
    return service.get_match(match_id)


@router.get("/matches/{match_id}/mds", response_model=MatchMds)
def get_match_mds(match_id: str, service: MatchdaysServiceDep) -> MatchMds:
    return service.get_match_mds(match_id)


@router.get("/matches/{match_id}/suggestions", response_model=SuggestionResult)
def suggest_referees(
    match_id: str,
    service: SuggestionsServiceDep,
    role: Optional[RefRole] = Query(None, description="Rol a cubrir (CENTRAL, AA1, AA2, 4TO)."),
    tolerance: int = Query(0, ge=0, le=3, description="Margen permitido de RCS por debajo del MDS."),
) -> SuggestionResult:
    return service.suggest_for_match(match_id, role=role, tolerance=tolerance)


@router.put("/matches/{match_id}/assignment", response_model=AssignmentResult)
def assign_terna(match_id: str, payload: TernaAssignment, service: AssignmentsServiceDep) -> AssignmentResult:
    """
    Guarda la terna del partido. Las validaciones que fallan responden 409
    con code (DUPLICATE_REFEREES, REFEREE_NOT_AVAILABLE, RECENT_TEAM_CONFLICT,
    SCHEDULE_CONFLICT, RCS_BELOW_THRESHOLD_BLOCK) y el detalle del conflicto.
    """
    return service.assign_terna(match_id, payload)


@router.delete("/matches/{match_id}/assignment", response_model=dict)
def clear_terna(match_id: str, service: AssignmentsServiceDep) -> dict:
    return service.clear_terna(match_id)
