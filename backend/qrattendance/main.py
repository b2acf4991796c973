"""
Point d'entrée principal de l'API QR Attendance.
Démarrage : uvicorn qrattendance.main:app --reload
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import qrattendance.models  # noqa: F401  enregistre les modèles dans Base.metadata avant create_all
from qrattendance.config import settings
from qrattendance.database import SessionLocal, init_db
from qrattendance.routers import attendance, reports, scan, students
from qrattendance.services.blob_store import SqlBlobStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie : crée les tables et le blob store ; la session de scan repart à IDLE."""
    init_db()
    app.state.blob_store = SqlBlobStore(SessionLocal)
    app.state.scan_session = None
    app.state.scan_lock = asyncio.Lock()
    logger.info("API QR Attendance démarrée (env=%s).", settings.ENV)
    yield
    if app.state.scan_session is not None:
        app.state.scan_session.stop()
    logger.info("API QR Attendance arrêtée.")


app = FastAPI(
    title="QR Attendance API",
    description="Registre des élèves, présences par QR code et rapports de présence",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)


app.include_router(students.router)
app.include_router(attendance.router)
app.include_router(scan.router)
app.include_router(reports.router)


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
    return {"status": "ok", "service": "QR Attendance API", "version": "0.1.0"}
