"""
Router pour le journal des présences.
Consultation par jour, présences du jour enrichies, import historique en masse.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from qrattendance.config import settings
from qrattendance.dependencies import get_ledger, get_scan_session, get_student_store
from qrattendance.schemas.attendance import (
    DATE_RE,
    AttendanceImportRequest,
    AttendanceImportResult,
    PresenceEvent,
    TodayAttendanceEntry,
)
from qrattendance.services.blob_store import StorageError
from qrattendance.services.ledger import Ledger
from qrattendance.services.scan_session import ScanSession
from qrattendance.services.student_store import StudentStore

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences"])


@router.get("", response_model=List[PresenceEvent], summary="Lister les présences")
def list_attendance(
    date: Optional[str] = Query(None, description="Jour au format YYYY-MM-DD"),
    ledger: Ledger = Depends(get_ledger),
):
    """Retourne toutes les présences, ou celles d'un jour donné, dans l'ordre d'enregistrement."""
    if date is None:
        return ledger.all()
    if not DATE_RE.match(date):
        raise HTTPException(status_code=400, detail="Date invalide : format attendu YYYY-MM-DD.")
    return ledger.by_date(date)


@router.get("/today", response_model=List[TodayAttendanceEntry], summary="Présences du jour")
def today_attendance(
    session: ScanSession = Depends(get_scan_session),
    store: StudentStore = Depends(get_student_store),
):
    """
    Présences du jour (selon l'horloge de la session de scan) avec nom, rôle
    et classe de l'élève (vides si l'élève a été supprimé).
    """
    students = {s.id: s for s in store.all()}
    entries = []
    for event in session.today_attendance():
        student = students.get(event.student_id)
        entries.append(TodayAttendanceEntry(
            event=event,
            student_name=student.name if student else None,
            roll_number=student.roll_number if student else None,
            class_name=student.class_name if student else None,
            section=student.section if student else None,
        ))
    return entries


@router.post(
    "/import",
    response_model=AttendanceImportResult,
    summary="Importer des présences historiques",
)
def import_attendance(data: AttendanceImportRequest, ledger: Ledger = Depends(get_ledger)):
    """
    Ajoute un lot de présences existantes sans passer par le scan.

    Comportement :
    - Idempotent sur l'id : une présence déjà connue est ignorée (pas d'erreur)
    - Pas de contrôle (élève, jour) : les données historiques sont reprises telles quelles
    - Retourne le rapport : ids acceptés / doublons / totaux
    """
    try:
        return ledger.import_events(data.events)
    except StorageError:
        raise HTTPException(status_code=503, detail="Impossible d'enregistrer l'import. Veuillez réessayer.")


@router.delete("", status_code=204, summary="Supprimer toutes les présences (développement)")
def clear_attendance(ledger: Ledger = Depends(get_ledger)):
    """Remise à zéro du journal. Refusée hors environnement de développement."""
    if settings.ENV != "development":
        raise HTTPException(status_code=403, detail="Remise à zéro réservée au développement.")
    ledger.clear()
