"""
Repositorios de ligas (leagues) y grupos (groups).

Los grupos guardan el delegate_id de su liga para poder filtrarse por ámbito
igual que el resto de tablas.
"""

from typing import Any, Dict, List, Optional

from designaciones.repositories.base_repository import BaseDelegateRepository
from designaciones.utils import norm


class LeaguesRepository(BaseDelegateRepository):
    TABLE = "leagues"

    def __init__(self, client, delegate_id: Optional[str]) -> None:
        super().__init__(client=client, delegate_id=delegate_id, table_name=self.TABLE)

    def list_leagues(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Ligas del ámbito, opcionalmente por estado. search filtra en memoria por nombre/slug/temporada."""
        query = self._select().order("name_lc")
        if status:
            query = query.eq("status", status)
        items = list(query.execute().data or [])
        if search and search.strip():
            s = norm(search)
            items = [
                x
                for x in items
                if s in (x.get("name_lc") or "")
                or s in (x.get("slug") or "")
                or s in (x.get("season_lc") or "")
            ]
        return items

    def find_duplicate(
        self,
        delegate_id: Optional[str],
        name_lc: str,
        season_lc: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Liga con mismo nombre y temporada normalizados en la delegación dada."""
        query = (
            self._table()
            .select("id")
            .eq("name_lc", name_lc)
            .eq("season_lc", season_lc)
        )
        if delegate_id:
            query = query.eq("delegate_id", delegate_id)
        rows = query.limit(2).execute().data or []
        return next((r for r in rows if r.get("id") != exclude_id), None)


class GroupsRepository(BaseDelegateRepository):
    TABLE = "groups"

    def __init__(self, client, delegate_id: Optional[str]) -> None:
        super().__init__(client=client, delegate_id=delegate_id, table_name=self.TABLE)

    def list_by_league(self, league_id: str) -> List[Dict[str, Any]]:
        return self.get_all(order_by="name_lc", league_id=league_id)

    def find_duplicate(
        self,
        league_id: str,
        name_lc: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        rows = (
            self._table()
            .select("id")
            .eq("league_id", league_id)
            .eq("name_lc", name_lc)
            .limit(2)
            .execute()
            .data
            or []
        )
        return next((r for r in rows if r.get("id") != exclude_id), None)
