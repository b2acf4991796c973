"""
Schémas Pydantic pour l'extraction OCR des cartes d'élève.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from qrattendance.schemas.student import StudentDetails


class OcrResult(BaseModel):
    """Estimation brute du modèle de vision : chaque champ peut être absent."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    father_name: Optional[str] = None
    school_name: Optional[str] = None
    class_name: Optional[str] = Field(default=None, alias="class")
    section: Optional[str] = None
    roll_number: Optional[str] = None
    gender: Optional[str] = None


class OcrExtraction(BaseModel):
    """Réponse de POST /students/ocr : résultat brut et formulaire pré-rempli."""

    raw: OcrResult
    details: StudentDetails
