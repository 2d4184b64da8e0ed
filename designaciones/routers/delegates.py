"""
Delegaciones (solo SUPERUSUARIO).

- GET /delegates: opciones para el selector de delegado activo.
- PUT /delegates/active: fija o limpia la cookie activeDelegateId.
  Al cambiar de delegado se invalida la caché del ámbito anterior.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Response

from designaciones.config import ACTIVE_DELEGATE_COOKIE, ACTIVE_DELEGATE_COOKIE_MAX_AGE, IS_PRODUCTION
from designaciones.deps import get_delegates_service
from designaciones.models import ActiveDelegateUpdate, DelegateOption
from designaciones.services import DelegatesService


router = APIRouter(prefix="/delegates", tags=["delegates"])

DelegatesServiceDep = Annotated[DelegatesService, Depends(get_delegates_service)]


@router.get("", response_model=List[DelegateOption])
def list_delegates(service: DelegatesServiceDep) -> List[DelegateOption]:
    return service.list_delegates()


@router.put("/active", response_model=dict)
def set_active_delegate(
    payload: ActiveDelegateUpdate,
    response: Response,
    service: DelegatesServiceDep,
) -> dict:
    """
    Cambia el delegado activo. activeDelegateId=null vuelve a la vista global
    y elimina la cookie.
    """
    active = service.switch(payload.delegate_id)
    if active:
        response.set_cookie(
            key=ACTIVE_DELEGATE_COOKIE,
            value=active,
            max_age=ACTIVE_DELEGATE_COOKIE_MAX_AGE,
            path="/",
            httponly=True,
            samesite="lax",
            secure=IS_PRODUCTION,
        )
    else:
        response.delete_cookie(key=ACTIVE_DELEGATE_COOKIE, path="/")
    return {"ok": True, "activeDelegateId": active}
