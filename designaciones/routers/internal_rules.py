"""
Reglas internas RA-XX de un árbitro.

El body de POST/PUT se valida en el servicio (unión discriminada por type)
para devolver 400 con field_errors por ruta de campo. No hay DELETE:
las reglas se desactivan con PATCH .../enabled.
"""

from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Body, Depends, status

from designaciones.deps import get_internal_rules_service
from designaciones.models import InternalRuleToggle
from designaciones.services import InternalRulesService


router = APIRouter(prefix="/referees/{referee_id}/internal-rules", tags=["internal-rules"])

RulesServiceDep = Annotated[InternalRulesService, Depends(get_internal_rules_service)]


def _dump(rule) -> dict:
    return rule.model_dump(mode="json", by_alias=True)


@router.get("", response_model=List[dict])
def list_rules(referee_id: str, service: RulesServiceDep) -> List[dict]:
    return [_dump(r) for r in service.list_rules(referee_id)]


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_rule(
    referee_id: str,
    service: RulesServiceDep,
    payload: Dict[str, Any] = Body(...),
) -> dict:
    return _dump(service.save_rule(referee_id, payload))


@router.put("/{rule_id}", response_model=dict)
def update_rule(
    referee_id: str,
    rule_id: str,
    service: RulesServiceDep,
    payload: Dict[str, Any] = Body(...),
) -> dict:
    return _dump(service.save_rule(referee_id, payload, rule_id=rule_id))


@router.patch("/{rule_id}/enabled", response_model=dict)
def toggle_rule(
    referee_id: str,
    rule_id: str,
    payload: InternalRuleToggle,
    service: RulesServiceDep,
) -> dict:
    return _dump(service.toggle_enabled(referee_id, rule_id, payload))
