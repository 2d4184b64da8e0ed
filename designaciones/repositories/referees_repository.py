"""
Repositorio de árbitros (referees). Unicidad de name_lc por delegación.
"""

from typing import Any, Dict, List, Optional

from designaciones.repositories.base_repository import BaseDelegateRepository
from designaciones.utils import norm


class RefereesRepository(BaseDelegateRepository):
    TABLE = "referees"

    def __init__(self, client, delegate_id: Optional[str]) -> None:
        super().__init__(client=client, delegate_id=delegate_id, table_name=self.TABLE)

    def list_referees(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 200,
    ) -> List[Dict[str, Any]]:
        query = self._select().order("name_lc").limit(limit)
        if status:
            query = query.eq("status", status)
        if search and search.strip():
            query = query.like("name_lc", f"%{norm(search)}%")
        return list(query.execute().data or [])

    def list_all(self, status: Optional[str] = None, page_size: int = 500) -> List[Dict[str, Any]]:
        """
        Todos los árbitros del ámbito, sin tope. Pagina con range() porque
        PostgREST corta cada respuesta en su max_rows.
        """
        rows: List[Dict[str, Any]] = []
        offset = 0
        while True:
            query = self._select().order("name_lc").order("id")
            if status:
                query = query.eq("status", status)
            page = list(query.range(offset, offset + page_size - 1).execute().data or [])
            rows.extend(page)
            if len(page) < page_size:
                return rows
            offset += page_size

    def find_duplicate(
        self,
        delegate_id: Optional[str],
        name_lc: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        query = self._table().select("id").eq("name_lc", name_lc)
        if delegate_id:
            query = query.eq("delegate_id", delegate_id)
        rows = query.limit(2).execute().data or []
        return next((r for r in rows if r.get("id") != exclude_id), None)
