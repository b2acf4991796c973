"""
Dépendances FastAPI : blob store, registre, journal et session de scan.

Le blob store, la session de scan et son verrou sont créés au démarrage
(lifespan) et rangés dans app.state ; les tests remplacent get_blob_store par
un InMemoryBlobStore via app.dependency_overrides.
"""

import asyncio

from fastapi import Depends, Request

from qrattendance.config import settings
from qrattendance.services.blob_store import BlobStore
from qrattendance.services.ledger import Ledger
from qrattendance.services.scan_session import ScanSession
from qrattendance.services.student_store import StudentStore


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_student_store(blob_store: BlobStore = Depends(get_blob_store)) -> StudentStore:
    return StudentStore(blob_store, settings.STUDENTS_KEY)


def get_ledger(blob_store: BlobStore = Depends(get_blob_store)) -> Ledger:
    return Ledger(blob_store, settings.ATTENDANCE_KEY)


async def get_scan_session(
    request: Request,
    students: StudentStore = Depends(get_student_store),
    ledger: Ledger = Depends(get_ledger),
) -> ScanSession:
    """Une seule session de scan par processus, créée à la première demande."""
    session = getattr(request.app.state, "scan_session", None)
    if session is None:
        session = ScanSession(students, ledger, cooldown_seconds=settings.SCAN_COOLDOWN_SECONDS)
        request.app.state.scan_session = session
    return session


def get_scan_lock(request: Request) -> asyncio.Lock:
    return request.app.state.scan_lock
