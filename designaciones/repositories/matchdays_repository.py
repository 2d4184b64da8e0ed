"""
Repositorios de jornadas (matchdays) y partidos (matches).

number de jornada es autoincremental dentro del grupo; la unicidad
(group_id, number) la garantiza un índice único en la base de datos.
"""

from typing import Any, Dict, List, Optional

from designaciones.repositories.base_repository import BaseDelegateRepository


class MatchdaysRepository(BaseDelegateRepository):
    TABLE = "matchdays"

    def __init__(self, client, delegate_id: Optional[str]) -> None:
        super().__init__(client=client, delegate_id=delegate_id, table_name=self.TABLE)

    def list_by_group(self, group_id: str, limit: int = 100) -> List[Dict[str, Any]]:
        return self.get_all(order_by="number", limit=limit, group_id=group_id)

    def next_number(self, group_id: str) -> int:
        """Siguiente número de jornada del grupo (1 si no hay ninguna)."""
        rows = (
            self._table()
            .select("number")
            .eq("group_id", group_id)
            .order("number", desc=True)
            .limit(1)
            .execute()
            .data
            or []
        )
        if not rows:
            return 1
        return int(rows[0].get("number") or 0) + 1

    def list_numbers_between(self, group_id: str, first: int, last: int) -> List[Dict[str, Any]]:
        """Jornadas del grupo con number en [first, last]."""
        response = (
            self._select()
            .eq("group_id", group_id)
            .gte("number", first)
            .lte("number", last)
            .order("number")
            .execute()
        )
        return list(response.data or [])


class MatchesRepository(BaseDelegateRepository):
    TABLE = "matches"

    def __init__(self, client, delegate_id: Optional[str]) -> None:
        super().__init__(client=client, delegate_id=delegate_id, table_name=self.TABLE)

    def list_by_matchday(self, matchday_id: str) -> List[Dict[str, Any]]:
        return self.get_all(order_by="kickoff", matchday_id=matchday_id)

    def list_by_matchdays(self, matchday_ids: List[str]) -> List[Dict[str, Any]]:
        ids = [m for m in dict.fromkeys(matchday_ids) if m]
        if not ids:
            return []
        return list(self._select().in_("matchday_id", ids).execute().data or [])

    def list_kickoff_between(self, start: str, end: str) -> List[Dict[str, Any]]:
        """Partidos del ámbito con kickoff ISO en [start, end]."""
        response = (
            self._select()
            .gte("kickoff", start)
            .lte("kickoff", end)
            .order("kickoff")
            .execute()
        )
        return list(response.data or [])
