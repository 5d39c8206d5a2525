"""
Point d'entrée principal de l'API Academy.
Démarrage : uvicorn academy.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import academy.models  # noqa: F401  (enregistre tous les modèles dans Base.metadata avant les routers)
from academy.config import settings
from academy.errors import AcademyError
from academy.routers import assignments, auth, classes, materials, search, sessions, students, tags, teachers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : configure la journalisation au démarrage."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("Academy API démarrée (env=%s)", settings.ENV)
    yield


app = FastAPI(
    title="Academy API",
    description="API d'administration d'un institut de cours : élèves, classes, séances, tags",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# allow_origin_regex est nécessaire pour les requêtes preflight POST avec Content-Type JSON.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(auth.router)
app.include_router(students.router)
app.include_router(teachers.router)
app.include_router(classes.router)
app.include_router(sessions.router)
app.include_router(materials.router)
app.include_router(assignments.router)
app.include_router(tags.router)
app.include_router(search.router)


@app.exception_handler(AcademyError)
async def academy_error_handler(request: Request, exc: AcademyError) -> JSONResponse:
    """Traduit les erreurs métier en réponse HTTP : statut, message, code machine et détails."""
    if exc.status_code >= 500:
        logger.error("%s sur %s %s : %s", exc.code, request.method, request.url.path, exc.message, exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "details": exc.details},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue.", "code": "INTERNAL_ERROR"},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Academy API", "version": "0.1.0"}
