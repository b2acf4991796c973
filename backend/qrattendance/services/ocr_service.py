"""
Extraction OCR des cartes d'élève via l'API REST Gemini (generateContent).

Contrat :
- clé API absente            → OcrConfigurationError
- erreur réseau / HTTP       → OcrServiceError
- réponse illisible/partielle → OcrResult avec champs à None (jamais d'exception)
"""

import base64
import json
import logging

import requests

from qrattendance.config import settings
from qrattendance.schemas.ocr import OcrResult

logger = logging.getLogger(__name__)

OCR_FIELDS = ("name", "father_name", "school_name", "class", "section", "roll_number", "gender")

OCR_PROMPT = """
Extract the following details from the image of a student I-card: 'name', 'father_name', 'school_name', 'class', 'section', 'roll_number', 'gender' (if present).
If a field is not explicitly present or clear, return null for that field.
Format the output as a JSON object with keys: name, father_name, school_name, class, section, roll_number, gender.
"""


class OcrConfigurationError(Exception):
    """Clé API Gemini non configurée."""


class OcrServiceError(Exception):
    """Échec de transport ou d'authentification auprès du service OCR."""


def _build_payload(image_bytes: bytes, mime_type: str) -> dict:
    return {
        "contents": [{
            "parts": [
                {"text": OCR_PROMPT},
                {"inline_data": {
                    "mime_type": mime_type,
                    "data": base64.b64encode(image_bytes).decode("ascii"),
                }},
            ],
        }],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": {
                "type": "OBJECT",
                "properties": {field: {"type": "STRING"} for field in OCR_FIELDS},
            },
        },
    }


def parse_ocr_response(body: dict) -> OcrResult:
    """
    Extrait le JSON produit par le modèle. Tout champ absent, vide ou de type
    inattendu devient None ; une réponse inexploitable donne un résultat vide.
    """
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
        data = json.loads(text.strip())
    except (KeyError, IndexError, TypeError, AttributeError, ValueError) as exc:
        logger.warning("Réponse OCR inexploitable, champs vides retournés : %s", exc)
        return OcrResult()

    if not isinstance(data, dict):
        logger.warning("Réponse OCR inattendue (pas un objet JSON) : %r", data)
        return OcrResult()

    cleaned = {}
    for field in OCR_FIELDS:
        value = data.get(field)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str):
            value = value.strip()
        cleaned[field] = value if isinstance(value, str) and value else None
    return OcrResult.model_validate(cleaned)


def extract_student_details(image_bytes: bytes, mime_type: str) -> OcrResult:
    """Envoie l'image de la carte à Gemini Vision et retourne les champs reconnus."""
    if not settings.GEMINI_API_KEY:
        raise OcrConfigurationError("Clé API Gemini non configurée (GEMINI_API_KEY).")

    url = f"{settings.GEMINI_API_URL}/{settings.GEMINI_MODEL}:generateContent"
    try:
        response = requests.post(
            url,
            params={"key": settings.GEMINI_API_KEY},
            json=_build_payload(image_bytes, mime_type),
            timeout=settings.OCR_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.error("Appel OCR échoué : %s", exc)
        raise OcrServiceError(f"Service OCR indisponible : {exc}") from exc

    try:
        body = response.json()
    except ValueError:
        logger.warning("Réponse OCR non JSON, champs vides retournés.")
        return OcrResult()

    result = parse_ocr_response(body)
    logger.info(
        "OCR terminé : %d/%d champs reconnus",
        sum(v is not None for v in result.model_dump().values()), len(OCR_FIELDS),
    )
    return result
