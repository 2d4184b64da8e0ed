import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Cargar .env desde la raíz del proyecto (donde se ejecuta uvicorn)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)
# Por si se ejecuta desde otra ruta, intentar también el cwd
load_dotenv()

SUPABASE_URL: str | None = os.environ.get("SUPABASE_URL")
SUPABASE_KEY: str | None = os.environ.get("SUPABASE_KEY")
SUPABASE_JWT_SECRET: str | None = os.environ.get("SUPABASE_JWT_SECRET")

# Desarrollo: si es "true", la API acepta peticiones sin token (SUPERUSUARIO dummy).
SKIP_AUTH: bool = os.environ.get("SKIP_AUTH", "").lower() in ("true", "1", "yes")

# Si es "true", el manejador global de 500 devuelve el mensaje de la excepción.
DEBUG: bool = os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")

ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development").strip().lower()
IS_PRODUCTION: bool = ENVIRONMENT == "production"

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").strip().upper()

# TTL de la caché en memoria (lecturas de catálogos y perfiles)
CACHE_TTL_SECONDS: int = int(os.environ.get("CACHE_TTL_SECONDS", "60"))

# Cookie con el delegado activo del SUPERUSUARIO
ACTIVE_DELEGATE_COOKIE: str = "activeDelegateId"
ACTIVE_DELEGATE_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 30  # 30 días


def _parse_origins(raw: str | None) -> List[str]:
    if not raw:
        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    return [o.strip() for o in raw.split(",") if o.strip()]


CORS_ORIGINS: List[str] = _parse_origins(os.environ.get("CORS_ORIGINS"))

# Designaciones: política por defecto si el RCS del central no llega al MDS
# (cada liga puede fijar la suya en rcs_policy) y ventana de choque de horario.
RCS_BELOW_MDS_POLICY: str = os.environ.get("RCS_BELOW_MDS_POLICY", "WARN").strip().upper()
SCHEDULE_CONFLICT_WINDOW_MINUTES: int = int(os.environ.get("SCHEDULE_CONFLICT_WINDOW_MINUTES", "120"))
