import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from designaciones.config import CORS_ORIGINS, DEBUG, LOG_LEVEL, SKIP_AUTH
from designaciones.routers import auth, delegates, internal_rules, leagues, matchdays, referees, teams, users
from designaciones.services.exceptions import (
    AssignmentRejectedError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

FORBIDDEN_DETAIL = "No tienes acceso a este recurso."


app = FastAPI(
    title="Designaciones API",
    version="1.0.0",
    description="API REST para la designación de árbitros por delegación.",
)


# ----- Errores de dominio -> HTTP -----


@app.exception_handler(ValidationError)
async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "field_errors": exc.field_errors},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body/query mal formados: mismo formato que los errores de dominio."""
    field_errors: dict = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field_errors.setdefault(".".join(loc) or "__root__", []).append(err.get("msg", "Valor inválido."))
    return JSONResponse(
        status_code=400,
        content={"detail": "Revisa los campos del formulario.", "field_errors": field_errors},
    )


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
    # El motivo real solo va al log
    logger.warning("Acceso denegado en %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=403, content={"detail": FORBIDDEN_DETAIL})


@app.exception_handler(NotFoundError)
async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(_request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(AssignmentRejectedError)
async def assignment_rejected_handler(_request: Request, exc: AssignmentRejectedError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"detail": exc.message, "code": exc.code, **exc.details},
    )


# Manejador global: en producción no exponer detail del 500; solo si DEBUG=true
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Error no controlado en %s %s", request.method, request.url.path)
    detail = str(exc) if DEBUG else "Internal Server Error"
    return JSONResponse(status_code=500, content={"detail": detail})


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Registro de routers bajo /api para que el frontend llame a /api/leagues, etc.
app.include_router(auth.router, prefix="/api")
app.include_router(delegates.router, prefix="/api")
app.include_router(leagues.router, prefix="/api")
app.include_router(teams.router, prefix="/api")
app.include_router(referees.router, prefix="/api")
app.include_router(internal_rules.router, prefix="/api")
app.include_router(matchdays.router, prefix="/api")
app.include_router(users.router, prefix="/api")


@app.get("/")
def root() -> dict:
    """Health check sencillo para verificar que el backend está levantado."""
    return {"status": "ok"}


@app.on_event("startup")
def startup():
    """Log de modo desarrollo al arrancar."""
    if SKIP_AUTH:
        logger.warning("Modo desarrollo: SKIP_AUTH=true (API acepta peticiones sin token)")


__all__ = ["app"]
