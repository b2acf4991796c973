"""
Router pour les élèves.
Enregistrement (POST /api/v1/students), listage, consultation,
QR code PNG et pré-remplissage du formulaire par OCR de la carte d'élève.
"""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from qrattendance.config import settings
from qrattendance.dependencies import get_ledger, get_student_store
from qrattendance.schemas.attendance import PresenceEvent
from qrattendance.schemas.ocr import OcrExtraction
from qrattendance.schemas.student import StudentCreate, StudentRecord
from qrattendance.services import ocr_service
from qrattendance.services.blob_store import StorageError
from qrattendance.services.ledger import Ledger
from qrattendance.services.ocr_normalizer import normalize_ocr_result
from qrattendance.services.qr_service import generate_qr_image
from qrattendance.services.registration_service import register_student
from qrattendance.services.student_store import StudentStore

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}


@router.get("", response_model=List[StudentRecord], summary="Lister tous les élèves")
def list_students(store: StudentStore = Depends(get_student_store)):
    """Retourne tous les élèves dans l'ordre d'enregistrement."""
    return store.all()


@router.post("", response_model=StudentRecord, status_code=201, summary="Enregistrer un élève")
def create_student(data: StudentCreate, store: StudentStore = Depends(get_student_store)):
    """
    Enregistre un élève : attribue un id unique et génère le QR code qui l'encode.
    Nom, numéro de rôle et classe sont obligatoires (pas de valeur par défaut N/A / Unknown).
    """
    try:
        return register_student(store, data)
    except StorageError:
        raise HTTPException(status_code=503, detail="Impossible d'enregistrer l'élève. Veuillez réessayer.")


@router.delete("", status_code=204, summary="Supprimer tous les élèves (développement)")
def clear_students(store: StudentStore = Depends(get_student_store)):
    """Remise à zéro du registre. Refusée hors environnement de développement."""
    if settings.ENV != "development":
        raise HTTPException(status_code=403, detail="Remise à zéro réservée au développement.")
    store.clear()


@router.post("/ocr", response_model=OcrExtraction, summary="Lire une carte d'élève (OCR)")
async def extract_from_icard(file: UploadFile = File(...)):
    """
    Envoie la photo de la carte d'élève au service OCR et retourne :
    - `raw` : les champs reconnus (None si absents)
    - `details` : le formulaire pré-rempli, valeurs par défaut pour les champs manquants

    Retourne 503 si l'OCR n'est pas configuré, 502 si le service est injoignable.
    """
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail="Format invalide. Seules les images JPEG, PNG ou WebP sont acceptées.")

    content = await file.read()

    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"Image trop volumineuse. Taille maximale : {settings.MAX_UPLOAD_SIZE_MB} Mo."
        )

    if not content:
        raise HTTPException(status_code=400, detail="L'image est vide.")

    try:
        raw = ocr_service.extract_student_details(content, file.content_type)
    except ocr_service.OcrConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ocr_service.OcrServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return OcrExtraction(raw=raw, details=normalize_ocr_result(raw))


@router.get("/{student_id}", response_model=StudentRecord, summary="Consulter un élève")
def get_student(student_id: str, store: StudentStore = Depends(get_student_store)):
    student = store.find_by_id(student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Élève introuvable.")
    return student


@router.get(
    "/{student_id}/qr",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
    summary="Télécharger le QR code d'un élève",
)
def get_student_qr(student_id: str, store: StudentStore = Depends(get_student_store)):
    """Retourne le QR code PNG encodant l'id de l'élève."""
    if store.find_by_id(student_id) is None:
        raise HTTPException(status_code=404, detail="Élève introuvable.")
    return Response(
        content=generate_qr_image(student_id),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="student_qr_{student_id}.png"'},
    )


@router.get("/{student_id}/attendance", response_model=List[PresenceEvent], summary="Historique des présences d'un élève")
def get_student_attendance(
    student_id: str,
    store: StudentStore = Depends(get_student_store),
    ledger: Ledger = Depends(get_ledger),
):
    """Retourne toutes les présences de l'élève, triées par date puis heure."""
    if store.find_by_id(student_id) is None:
        raise HTTPException(status_code=404, detail="Élève introuvable.")
    events = [e for e in ledger.all() if e.student_id == student_id]
    return sorted(events, key=lambda e: (e.date, e.time))
