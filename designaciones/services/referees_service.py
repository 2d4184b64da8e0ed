"""
Servicio de árbitros. Nombre único (normalizado) dentro de cada delegación.
"""

from typing import Any, Dict, List, Optional

from designaciones.cache import invalidate_entity, query_cache, scope_cache_key
from designaciones.models import DelegateContext, RefereeCreate, RefereeUpdate
from designaciones.repositories.referees_repository import RefereesRepository
from designaciones.services.delegate_scope import (
    assert_can_edit,
    assert_doc_belongs_to_delegate,
    assert_effective_delegate_id,
)
from designaciones.services.difficulty import referee_tier_to_rcs_central
from designaciones.services.exceptions import ConflictError, NotFoundError
from designaciones.utils import norm


class RefereesService:
    def __init__(self, repository: RefereesRepository, ctx: DelegateContext) -> None:
        self._repo = repository
        self._ctx = ctx

    def list_referees(self, status: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
        key = f"{scope_cache_key(self._repo.delegate_id)}referees:{status or ''}:{norm(search)}"
        rows = query_cache.get_or_set(key, lambda: self._repo.list_referees(status=status, search=search))
        return [{**r, "rcs_central": referee_tier_to_rcs_central(r.get("tier"))} for r in rows]

    def get_referee(self, referee_id: str) -> Dict[str, Any]:
        referee = self._repo.get_by_id(referee_id)
        if not referee:
            raise NotFoundError("Árbitro no encontrado.")
        assert_doc_belongs_to_delegate(referee, self._ctx)
        return referee

    def create_referee(self, payload: RefereeCreate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        delegate_id = assert_effective_delegate_id(self._ctx)

        name_lc = norm(payload.name)
        if self._repo.find_duplicate(delegate_id, name_lc):
            raise ConflictError("Ya existe un árbitro con ese nombre.")

        row = payload.model_dump(mode="json")
        row["name"] = payload.name.strip()
        row["name_lc"] = name_lc
        created = self._repo.create(row)
        invalidate_entity("referees", delegate_id)
        return created

    def update_referee(self, referee_id: str, payload: RefereeUpdate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        existing = self.get_referee(referee_id)
        update_data = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        if not update_data:
            return existing

        if "name" in update_data:
            name_lc = norm(update_data["name"])
            if self._repo.find_duplicate(existing.get("delegate_id"), name_lc, exclude_id=referee_id):
                raise ConflictError("Ya existe un árbitro con ese nombre.")
            update_data["name"] = update_data["name"].strip()
            update_data["name_lc"] = name_lc

        try:
            updated = self._repo.update(referee_id, update_data)
        except ValueError:
            raise NotFoundError("Árbitro no encontrado.")
        invalidate_entity("referees", existing.get("delegate_id"))
        return updated
