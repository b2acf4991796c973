"""
Schémas Pydantic pour les élèves (registre d'identité).
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Valeurs par défaut appliquées quand l'OCR ne trouve pas un champ
FALLBACK_VALUE = "N/A"
DEFAULT_SCHOOL_NAME = "Smart School"
DEFAULT_CLASS = "Unknown"
DEFAULT_SECTION = "Unknown"
DEFAULT_GENDER = "Unknown"
NO_IMAGE_PLACEHOLDER_URL = "https://placehold.co/150x150?text=No+Image"

GENDER_OPTIONS: List[str] = [DEFAULT_GENDER, "Male", "Female", "Other"]
CLASS_OPTIONS: List[str] = [
    DEFAULT_CLASS, "Nursery", "LKG", "UKG",
    "1st", "2nd", "3rd", "4th", "5th", "6th",
    "7th", "8th", "9th", "10th", "11th", "12th",
]


class StudentDetails(BaseModel):
    """Champs saisis ou extraits d'une carte d'élève, normalisés et non nuls."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = FALLBACK_VALUE
    father_name: str = FALLBACK_VALUE
    school_name: str = DEFAULT_SCHOOL_NAME
    class_name: str = Field(default=DEFAULT_CLASS, alias="class")
    section: str = DEFAULT_SECTION
    roll_number: str = FALLBACK_VALUE
    gender: str = DEFAULT_GENDER


class StudentCreate(StudentDetails):
    """Schéma d'enregistrement d'un élève (POST /students)."""
    # Les valeurs par défaut (N/A, Unknown) doivent elles aussi être rejetées
    model_config = ConfigDict(populate_by_name=True, validate_default=True)

    icard_image_url: Optional[str] = None  # data URL de la photo de la carte (optionnelle)

    @field_validator("name", "roll_number")
    @classmethod
    def required_field(cls, v: str) -> str:
        v = v.strip()
        if not v or v == FALLBACK_VALUE:
            raise ValueError("Le nom et le numéro de rôle sont obligatoires.")
        return v

    @field_validator("class_name")
    @classmethod
    def class_selected(cls, v: str) -> str:
        v = v.strip()
        if not v or v == DEFAULT_CLASS:
            raise ValueError("La classe est obligatoire.")
        return v

    @field_validator("father_name", "school_name", "section", "gender")
    @classmethod
    def strip_optional(cls, v: str) -> str:
        return v.strip()


class StudentRecord(BaseModel):
    """Élève enregistré. L'id est attribué à l'enregistrement et ne change jamais."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    father_name: str
    school_name: str
    class_name: str = Field(alias="class")
    section: str
    roll_number: str
    gender: Optional[str] = None
    icard_image_url: str
    qr_image_url: str
    created_at: str
