"""
Repositorio de reglas internas RA-XX (tabla internal_rules).

Cada fila: id, referee_id, delegate_id, type, params (jsonb), enabled,
reason, updated_at, updated_by. Las reglas no se borran: se desactivan.
"""

from typing import Any, Dict, List, Optional

from designaciones.repositories.base_repository import BaseDelegateRepository


class InternalRulesRepository(BaseDelegateRepository):
    TABLE = "internal_rules"

    def __init__(self, client, delegate_id: Optional[str]) -> None:
        super().__init__(client=client, delegate_id=delegate_id, table_name=self.TABLE)

    def list_by_referee(self, referee_id: str) -> List[Dict[str, Any]]:
        return self.get_all(order_by="updated_at", order_desc=True, referee_id=referee_id)

    def list_enabled_for_referees(self, referee_ids: List[str]) -> List[Dict[str, Any]]:
        ids = [r for r in dict.fromkeys(referee_ids) if r]
        if not ids:
            return []
        rows: List[Dict[str, Any]] = []
        # Lotes para no exceder el largo de URL de PostgREST con in_()
        for start in range(0, len(ids), 100):
            response = (
                self._select()
                .in_("referee_id", ids[start:start + 100])
                .eq("enabled", True)
                .execute()
            )
            rows.extend(response.data or [])
        return rows

    def get_for_referee(self, referee_id: str, rule_id: str) -> Optional[Dict[str, Any]]:
        response = (
            self._select()
            .eq("id", rule_id)
            .eq("referee_id", referee_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]
