"""
Delegaciones (tabla delegates) y perfiles de usuario (tabla profiles).

Estas tablas no están scoped por delegado: son el catálogo de tenants
y la fuente de rol/delegate_id cuando el token no trae claims.
"""

from typing import Any, Dict, List, Optional

from supabase import Client


class DelegatesRepository:
    TABLE = "delegates"

    def __init__(self, client: Client) -> None:
        self._client = client

    def list_active(self) -> List[Dict[str, Any]]:
        """
        Delegaciones activas (is_active ausente cuenta como activa),
        ordenadas por order y después por nombre.
        """
        response = self._client.table(self.TABLE).select("*").execute()
        rows = [r for r in (response.data or []) if r.get("is_active") is not False]

        def _sort_key(row: Dict[str, Any]):
            order = row.get("order")
            name = (row.get("name") or row.get("id") or "").lower()
            return (order is None, order if order is not None else 0, name)

        return sorted(rows, key=_sort_key)

    def get_by_id(self, delegate_id: str) -> Optional[Dict[str, Any]]:
        response = (
            self._client.table(self.TABLE)
            .select("*")
            .eq("id", delegate_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]


class ProfilesRepository:
    TABLE = "profiles"

    def __init__(self, client: Client) -> None:
        self._client = client

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        response = (
            self._client.table(self.TABLE)
            .select("id, role, delegate_id, email, display_name")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def update_identity(self, user_id: str, role: str, delegate_id: Optional[str]) -> Dict[str, Any]:
        response = (
            self._client.table(self.TABLE)
            .update({"role": role, "delegate_id": delegate_id})
            .eq("id", user_id)
            .execute()
        )
        if not response.data:
            raise ValueError("Perfil no encontrado.")
        return response.data[0]
