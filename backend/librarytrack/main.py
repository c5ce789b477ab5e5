"""
Point d'entrée principal de l'API LibraryTrack.
Démarrage : uvicorn librarytrack.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from librarytrack.config import settings
from librarytrack.database import init_db
from librarytrack.exceptions import LibraryTrackError
from librarytrack.routers import admin, branches, logs, scans, students
from librarytrack.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie : crée les tables, puis démarre et arrête le scheduler APScheduler."""
    init_db()
    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="LibraryTrack API",
    description="Journal des entrées/sorties de la bibliothèque par scan de carte étudiant",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS: autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(scans.router)
app.include_router(students.router)
app.include_router(branches.router)
app.include_router(logs.router)
app.include_router(admin.router)


@app.exception_handler(LibraryTrackError)
async def library_error_handler(request: Request, exc: LibraryTrackError) -> JSONResponse:
    """
    Erreurs métier du poste de scan → message lisible pour le toast,
    nom de l'erreur et données utiles (ex. wait_remaining).
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "error": type(exc).__name__, **exc.payload()},
        headers=exc.headers() or None,
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
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "LibraryTrack API", "version": "0.1.0"}
