"""
Servicio de usuarios: asignar rol y delegación (acción users.setRole).

El cambio se escribe en public.profiles y en app_metadata de Supabase Auth,
que es lo primero que lee get_current_user. El perfil cacheado se invalida
para que el siguiente request ya vea el rol nuevo.
"""

import logging
from typing import Any, Dict

from supabase import Client

from designaciones.cache import profile_cache
from designaciones.models import DelegateContext, UserRoleOut, UserRoleUpdate
from designaciones.repositories.delegates_repository import DelegatesRepository, ProfilesRepository
from designaciones.roles import Role, can_set_user_role
from designaciones.services.exceptions import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class UsersService:
    def __init__(
        self,
        client: Client,
        profiles_repo: ProfilesRepository,
        delegates_repo: DelegatesRepository,
        ctx: DelegateContext,
    ) -> None:
        self._client = client
        self._profiles = profiles_repo
        self._delegates = delegates_repo
        self._ctx = ctx

    def set_role(self, user_id: str, payload: UserRoleUpdate) -> UserRoleOut:
        if not can_set_user_role(self._ctx.role):
            raise AuthorizationError(f"El rol {self._ctx.role.value} no puede asignar roles.")

        delegate_id = (payload.delegate_id or "").strip() or None
        if payload.role == Role.DELEGADO and not delegate_id:
            raise ValidationError(field_errors={"delegateId": ["Un DELEGADO necesita delegación."]})
        if delegate_id:
            delegate = self._delegates.get_by_id(delegate_id)
            if not delegate or delegate.get("is_active") is False:
                raise ValidationError(field_errors={"delegateId": ["Delegación no encontrada o inactiva."]})

        if not self._profiles.get_profile(user_id):
            raise NotFoundError("Usuario no encontrado.")
        self._profiles.update_identity(user_id, payload.role.value, delegate_id)

        app_metadata: Dict[str, Any] = {"role": payload.role.value, "delegate_id": delegate_id}
        self._client.auth.admin.update_user_by_id(user_id, {"app_metadata": app_metadata})
        profile_cache.invalidate(user_id)

        logger.info("%s asigna rol %s (delegación %s) a %s", self._ctx.uid, payload.role.value, delegate_id, user_id)
        return UserRoleOut(user_id=user_id, role=payload.role, delegate_id=delegate_id)
