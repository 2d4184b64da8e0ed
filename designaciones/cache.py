"""
Caché en memoria con TTL para evitar lecturas repetidas a Supabase.

Vive en la memoria del proceso. Las claves de datos de una delegación
empiezan por scope_cache_key(delegate_id), de modo que al cambiar de
delegado o al escribir una entidad se invalida por prefijo.
"""

import threading
import time
from typing import Any, Dict, Optional, Tuple

from designaciones.config import CACHE_TTL_SECONDS

_MISSING = object()

GLOBAL_SCOPE = "__all__"


def scope_cache_key(delegate_id: Optional[str]) -> str:
    """Prefijo de caché para un ámbito de delegación (None = vista global)."""
    return f"delegate:{delegate_id or GLOBAL_SCOPE}:"


class TTLCache:
    """Diccionario clave -> (valor, expiry) protegido por lock."""

    def __init__(self, ttl_seconds: float = CACHE_TTL_SECONDS) -> None:
        self._ttl = ttl_seconds
        self._store: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        """Devuelve el valor si está en caché y no expirado; default si miss."""
        with self._lock:
            entry = self._store.get(key)
            if not entry:
                return default
            value, expiry = entry
            if time.monotonic() >= expiry:
                del self._store[key]
                return default
            return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._store[key] = (value, time.monotonic() + ttl)

    def get_or_set(self, key: str, loader, ttl_seconds: Optional[float] = None) -> Any:
        """Lee de caché o llama a loader() y guarda el resultado."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = loader()
        self.set(key, value, ttl_seconds)
        return value

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        """Borra todas las claves que empiezan por prefix. Devuelve cuántas borró."""
        with self._lock:
            keys = [k for k in self._store if k.startswith(prefix)]
            for k in keys:
                del self._store[k]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING


# Caché de lecturas por delegación (ligas, equipos, árbitros, reglas)
query_cache = TTLCache()

# Caché de perfiles: user_id -> (role, delegate_id)
profile_cache = TTLCache()


def invalidate_entity(entity: str, delegate_id: Optional[str]) -> None:
    """
    Invalida las lecturas cacheadas de una entidad en la delegación afectada
    y en la vista global del SUPERUSUARIO.
    """
    query_cache.invalidate_prefix(f"{scope_cache_key(delegate_id)}{entity}:")
    query_cache.invalidate_prefix(f"{scope_cache_key(None)}{entity}:")
