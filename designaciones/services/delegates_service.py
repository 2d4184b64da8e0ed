"""
Catálogo de delegaciones y cambio de delegado activo (solo SUPERUSUARIO).
"""

from typing import List, Optional

from designaciones.cache import query_cache
from designaciones.models import DelegateContext, DelegateOption
from designaciones.repositories.delegates_repository import DelegatesRepository
from designaciones.services.delegate_scope import assert_is_superuser, switch_active_delegate
from designaciones.services.exceptions import NotFoundError


class DelegatesService:
    def __init__(self, repository: DelegatesRepository, ctx: DelegateContext) -> None:
        self._repo = repository
        self._ctx = ctx

    def list_delegates(self) -> List[DelegateOption]:
        assert_is_superuser(self._ctx)
        return [
            DelegateOption(value=row["id"], label=row.get("name") or row["id"])
            for row in self._repo.list_active()
        ]

    def switch(self, delegate_id: Optional[str]) -> Optional[str]:
        """
        Valida el delegado elegido y cambia el ámbito activo.
        None (o vacío) vuelve a la vista global.
        """
        assert_is_superuser(self._ctx)
        new_id = (delegate_id or "").strip() or None
        if new_id is not None:
            row = self._repo.get_by_id(new_id)
            if not row or row.get("is_active") is False:
                raise NotFoundError("Delegación no encontrada.")
        return switch_active_delegate(self._ctx, new_id, query_cache)
