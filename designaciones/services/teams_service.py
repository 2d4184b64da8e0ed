"""
Servicio de equipos: alta/edición con unicidad de nombre por grupo
y tablero de tiers de dificultad (de donde sale el MDS de cada partido).
"""

from typing import Any, Dict, Optional

from designaciones.cache import invalidate_entity
from designaciones.models import DelegateContext, TeamCreate, TeamDifficultyTier, TeamPage, TeamUpdate
from designaciones.repositories.leagues_repository import GroupsRepository
from designaciones.repositories.teams_repository import TeamsRepository
from designaciones.services.delegate_scope import (
    assert_can_edit,
    assert_doc_belongs_to_delegate,
    assert_effective_delegate_id,
)
from designaciones.services.exceptions import ConflictError, NotFoundError
from designaciones.utils import norm


class TeamsService:
    def __init__(
        self,
        teams_repo: TeamsRepository,
        groups_repo: GroupsRepository,
        ctx: DelegateContext,
    ) -> None:
        self._teams = teams_repo
        self._groups = groups_repo
        self._ctx = ctx

    def _get_group(self, group_id: str) -> Dict[str, Any]:
        group = self._groups.get_by_id(group_id)
        if not group:
            raise NotFoundError("Grupo no encontrado.")
        assert_doc_belongs_to_delegate(group, self._ctx)
        return group

    def list_teams(
        self,
        group_id: str,
        search: Optional[str] = None,
        page_size: int = 20,
        cursor_id: Optional[str] = None,
    ) -> TeamPage:
        self._get_group(group_id)
        items, next_cursor = self._teams.list_by_group(
            group_id, search=search, page_size=page_size, cursor_id=cursor_id
        )
        return TeamPage(items=items, next_cursor_id=next_cursor)

    def get_team(self, team_id: str) -> Dict[str, Any]:
        team = self._teams.get_by_id(team_id)
        if not team:
            raise NotFoundError("Equipo no encontrado.")
        assert_doc_belongs_to_delegate(team, self._ctx)
        return team

    def create_team(self, group_id: str, payload: TeamCreate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        delegate_id = assert_effective_delegate_id(self._ctx)
        self._get_group(group_id)

        name_lc = norm(payload.name)
        if self._teams.find_duplicate(group_id, name_lc):
            raise ConflictError("Ya existe un equipo con ese nombre en el grupo.")

        created = self._teams.create({
            "group_id": group_id,
            "name": payload.name.strip(),
            "name_lc": name_lc,
            "municipality": (payload.municipality or "").strip(),
            "venue": (payload.venue or "").strip(),
            "tier": payload.tier.value,
        })
        invalidate_entity("teams", delegate_id)
        return created

    def update_team(self, team_id: str, payload: TeamUpdate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        existing = self.get_team(team_id)
        update_data = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        if not update_data:
            return existing

        if "name" in update_data:
            name_lc = norm(update_data["name"])
            if name_lc != existing.get("name_lc") and self._teams.find_duplicate(
                existing["group_id"], name_lc, exclude_id=team_id
            ):
                raise ConflictError("Ya existe un equipo con ese nombre en el grupo.")
            update_data["name"] = update_data["name"].strip()
            update_data["name_lc"] = name_lc
        for field in ("municipality", "venue"):
            if field in update_data:
                update_data[field] = update_data[field].strip()

        try:
            updated = self._teams.update(team_id, update_data)
        except ValueError:
            raise NotFoundError("Equipo no encontrado.")
        invalidate_entity("teams", existing.get("delegate_id"))
        return updated

    def set_tier(self, team_id: str, tier: TeamDifficultyTier) -> Dict[str, Any]:
        """Mueve el equipo de columna en el tablero de dificultad."""
        assert_can_edit(self._ctx)
        existing = self.get_team(team_id)
        try:
            updated = self._teams.set_tier(team_id, tier.value)
        except ValueError:
            raise NotFoundError("Equipo no encontrado.")
        invalidate_entity("teams", existing.get("delegate_id"))
        return updated

    def delete_team(self, team_id: str) -> None:
        assert_can_edit(self._ctx)
        existing = self.get_team(team_id)
        self._teams.delete(team_id)
        invalidate_entity("teams", existing.get("delegate_id"))
