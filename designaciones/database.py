from functools import lru_cache

from supabase import Client, create_client

from designaciones.config import SUPABASE_KEY, SUPABASE_URL


def _create_supabase_client() -> Client:
  """
  Crea una instancia de cliente Supabase utilizando variables de entorno.

  Espera encontrar en `.env`:
    - SUPABASE_URL  (URL completa del proyecto, https://xxxx.supabase.co)
    - SUPABASE_KEY  (usa la clave service role, NO la public key)
  """
  if not SUPABASE_URL or not SUPABASE_KEY:
    raise RuntimeError(
      "Faltan las variables de entorno SUPABASE_URL / SUPABASE_KEY "
      "para conectar con Supabase."
    )

  url = SUPABASE_URL.strip()
  if not url.startswith("http://") and not url.startswith("https://"):
    raise RuntimeError(
      "SUPABASE_URL debe ser la URL completa del proyecto, por ejemplo:\n"
      "  https://abcdefgh.supabase.co"
    )

  return create_client(url, SUPABASE_KEY)


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
  """
  Devuelve un cliente Supabase singleton para todo el proceso FastAPI.
  Se crea en el primer uso, no al importar el módulo.
  """
  return _create_supabase_client()


__all__ = ["get_supabase_client"]
