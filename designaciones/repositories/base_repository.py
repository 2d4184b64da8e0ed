"""
Repositorio base multi-tenant para Supabase.

Todas las operaciones aplican el filtro delegate_id del ámbito del repositorio.
El único ámbito sin filtro es la vista global del SUPERUSUARIO (delegate_id=None),
y en ese ámbito no se permite insertar: todo registro nuevo nace con delegado.
"""

from typing import Any, Dict, List, Optional

from supabase import Client

from designaciones.utils import now_iso


class BaseDelegateRepository:
    """
    Repositorio base que scopea todas las operaciones por delegate_id.

    Inicialización con el cliente Supabase y el delegate_id efectivo
    (str, o None para la vista global del SUPERUSUARIO).
    """

    def __init__(
        self,
        client: Client,
        delegate_id: Optional[str],
        table_name: str,
        pk_column: str = "id",
    ) -> None:
        self._client = client
        self._delegate_id = str(delegate_id) if delegate_id else None
        self._table_name = table_name
        self._pk_column = pk_column

    @property
    def delegate_id(self) -> Optional[str]:
        """Delegación del repositorio (inmutable). None = vista global."""
        return self._delegate_id

    def _table(self):
        return self._client.table(self._table_name)

    def _scoped(self, query):
        """Añade el filtro de delegación si el repositorio tiene ámbito."""
        if self._delegate_id:
            query = query.eq("delegate_id", self._delegate_id)
        return query

    def _select(self, select: str = "*"):
        return self._scoped(self._table().select(select))

    def get_all(
        self,
        select: str = "*",
        order_by: Optional[str] = None,
        order_desc: bool = False,
        limit: Optional[int] = None,
        **extra_eq: Any,
    ) -> List[Dict[str, Any]]:
        """
        Lista los registros de la tabla en el ámbito.

        extra_eq: filtros adicionales .eq(key, value) además de delegate_id.
        """
        query = self._select(select)
        for key, value in extra_eq.items():
            query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=order_desc)
        if limit:
            query = query.limit(limit)
        response = query.execute()
        return list(response.data or [])

    def get_by_id(self, pk_value: Any, select: str = "*") -> Optional[Dict[str, Any]]:
        """Obtiene un registro por PK, solo si pertenece al ámbito."""
        response = self._select(select).eq(self._pk_column, pk_value).limit(1).execute()
        if not response.data:
            return None
        return response.data[0]

    def exists(self, **extra_eq: Any) -> bool:
        """True si hay al menos un registro en el ámbito con esos filtros."""
        query = self._select("id")
        for key, value in extra_eq.items():
            query = query.eq(key, value)
        return bool(query.limit(1).execute().data)

    def get_many(self, pk_values: List[Any], select: str = "*") -> List[Dict[str, Any]]:
        ids = [v for v in dict.fromkeys(pk_values) if v]
        if not ids:
            return []
        response = self._select(select).in_(self._pk_column, ids).execute()
        return list(response.data or [])

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Inserta un registro. delegate_id se inyecta siempre desde el repositorio;
        si el payload incluye delegate_id, se sobrescribe.
        """
        if not self._delegate_id:
            raise ValueError("No se puede crear un registro sin delegado.")
        now = now_iso()
        payload = {
            **data,
            "delegate_id": self._delegate_id,
            "created_at": now,
            "updated_at": now,
        }
        response = self._table().insert(payload).execute()
        if not response.data:
            raise RuntimeError("Insert no devolvió datos.")
        return response.data[0] if isinstance(response.data, list) else response.data

    def update(self, pk_value: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Actualiza un registro por PK dentro del ámbito.
        No permite cambiar delegate_id (se ignora si viene en data).
        """
        payload = {k: v for k, v in data.items() if k not in ("delegate_id", self._pk_column)}
        if not payload:
            row = self.get_by_id(pk_value)
            if not row:
                raise ValueError("Registro no encontrado.")
            return row
        payload["updated_at"] = now_iso()
        query = self._scoped(self._table().update(payload)).eq(self._pk_column, pk_value)
        response = query.execute()
        if not response.data:
            raise ValueError("Registro no encontrado o sin cambios.")
        return response.data[0] if isinstance(response.data, list) else response.data

    def delete(self, pk_value: Any) -> None:
        """Elimina un registro por PK. Solo borra si pertenece al ámbito."""
        self._scoped(self._table().delete()).eq(self._pk_column, pk_value).execute()
