"""
Repositorio de equipos (teams).

Listado por grupo ordenado por name_lc, con búsqueda por prefijo y
paginación por cursor (id del último equipo de la página anterior).
"""

from typing import Any, Dict, List, Optional, Tuple

from designaciones.repositories.base_repository import BaseDelegateRepository
from designaciones.utils import norm, now_iso


class TeamsRepository(BaseDelegateRepository):
    TABLE = "teams"

    def __init__(self, client, delegate_id: Optional[str]) -> None:
        super().__init__(client=client, delegate_id=delegate_id, table_name=self.TABLE)

    def list_by_group(
        self,
        group_id: str,
        search: Optional[str] = None,
        page_size: int = 20,
        cursor_id: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """Devuelve (equipos, next_cursor_id). next_cursor_id es None en la última página."""
        query = self._select().eq("group_id", group_id)

        if search and search.strip():
            query = query.like("name_lc", f"{norm(search)}%")

        if cursor_id:
            cursor = self.get_by_id(cursor_id)
            if cursor:
                query = query.gt("name_lc", cursor.get("name_lc") or "")

        rows = list(query.order("name_lc").limit(page_size + 1).execute().data or [])
        has_more = len(rows) > page_size
        items = rows[:page_size]
        next_cursor = items[-1]["id"] if has_more and items else None
        return items, next_cursor

    def find_duplicate(
        self,
        group_id: str,
        name_lc: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        rows = (
            self._table()
            .select("id")
            .eq("group_id", group_id)
            .eq("name_lc", name_lc)
            .limit(2)
            .execute()
            .data
            or []
        )
        return next((r for r in rows if r.get("id") != exclude_id), None)

    def set_tier(self, team_id: str, tier: str) -> Dict[str, Any]:
        """Cambia solo el tier (tablero de dificultad)."""
        response = (
            self._scoped(self._table().update({"tier": tier, "updated_at": now_iso()}))
            .eq("id", team_id)
            .execute()
        )
        if not response.data:
            raise ValueError("Equipo no encontrado.")
        return response.data[0]
