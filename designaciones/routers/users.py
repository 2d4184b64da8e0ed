"""
Administración de usuarios: rol y delegación (solo SUPERUSUARIO).
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from designaciones.deps import get_users_service
from designaciones.models import UserRoleOut, UserRoleUpdate
from designaciones.services import UsersService


router = APIRouter(prefix="/users", tags=["users"])

UsersServiceDep = Annotated[UsersService, Depends(get_users_service)]


@router.put("/{user_id}/role", response_model=UserRoleOut)
def set_user_role(user_id: str, payload: UserRoleUpdate, service: UsersServiceDep) -> UserRoleOut:
    return service.set_role(user_id, payload)
