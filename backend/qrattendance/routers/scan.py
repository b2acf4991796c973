"""
Router pour la session de scan des QR codes.

Le lecteur (caméra côté client) transmet chaque identifiant décodé et chaque
erreur de lecture. Les appels qui modifient la session passent par un verrou
asyncio : un seul on_decode à la fois, exécuté hors de la boucle d'événements
(run_in_threadpool) car il lit et écrit en base.
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from qrattendance.dependencies import get_scan_lock, get_scan_session
from qrattendance.schemas.attendance import DecodeRequest, DeviceErrorRequest, ScanOutcome, ScanStatus
from qrattendance.services.scan_session import ScanSession

router = APIRouter(prefix="/api/v1/scan", tags=["Scan"])


@router.get("/status", response_model=ScanStatus, summary="État de la session de scan")
async def scan_status(session: ScanSession = Depends(get_scan_session)):
    return session.status()


@router.post("/start", response_model=ScanStatus, summary="Démarrer le scan")
async def start_scan(
    session: ScanSession = Depends(get_scan_session),
    lock: asyncio.Lock = Depends(get_scan_lock),
):
    async with lock:
        session.start()
        return session.status()


@router.post("/stop", response_model=ScanStatus, summary="Arrêter le scan")
async def stop_scan(
    session: ScanSession = Depends(get_scan_session),
    lock: asyncio.Lock = Depends(get_scan_lock),
):
    """Attend la fin du décodage en cours : une présence est écrite en entier ou pas du tout."""
    async with lock:
        session.stop()
        return session.status()


@router.post("/decode", response_model=ScanOutcome, summary="Traiter un QR code décodé")
async def decode(
    data: DecodeRequest,
    session: ScanSession = Depends(get_scan_session),
    lock: asyncio.Lock = Depends(get_scan_lock),
):
    """
    Marque l'élève présent pour aujourd'hui si le QR est valide.

    Résultats possibles (toujours 200) : COOLDOWN, NOT_FOUND, DUPLICATE,
    MARKED_PRESENT, STORAGE_ERROR. Retourne 409 si la session n'est pas démarrée.
    """
    async with lock:
        try:
            return await run_in_threadpool(session.on_decode, data.text)
        except ValueError as e:
            raise HTTPException(status_code=409, detail=str(e))


@router.post("/error", response_model=ScanOutcome, summary="Signaler une erreur du lecteur")
async def device_error(
    data: DeviceErrorRequest,
    session: ScanSession = Depends(get_scan_session),
    lock: asyncio.Lock = Depends(get_scan_lock),
):
    """
    Erreur caméra/permission → DEVICE_ERROR et arrêt de la session.
    Erreur de lecture passagère (aucun QR dans l'image…) → TRANSIENT_ERROR, session inchangée.
    """
    async with lock:
        return session.on_error(data.message)
