"""
Schémas Pydantic pour les présences et la session de scan.
"""

import re
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

MAX_IMPORT_SIZE = 1000
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}:\d{2}$"
DATE_RE = re.compile(DATE_PATTERN)


class PresenceEvent(BaseModel):
    """Présence d'un élève pour un jour donné. Immuable une fois enregistrée."""

    id: str
    student_id: str               # Peut référencer un élève supprimé (événement orphelin)
    date: str = Field(pattern=DATE_PATTERN)
    status: Literal["present", "absent"] = "present"
    time: str = Field(pattern=TIME_PATTERN)


class AttendanceImportRequest(BaseModel):
    """Import en masse de présences historiques (hors flux de scan)."""

    events: List[PresenceEvent]

    @field_validator("events")
    @classmethod
    def events_not_too_large(cls, v: List[PresenceEvent]) -> List[PresenceEvent]:
        if len(v) > MAX_IMPORT_SIZE:
            raise ValueError(f"Import trop grand : maximum {MAX_IMPORT_SIZE} présences par requête.")
        return v


class AttendanceImportResult(BaseModel):
    """Rapport d'import : ids insérés et ids déjà connus (idempotence)."""

    accepted: List[str]
    duplicate: List[str]
    total_received: int
    total_inserted: int


class TodayAttendanceEntry(BaseModel):
    """Présence du jour enrichie des informations de l'élève (None si orphelin)."""

    event: PresenceEvent
    student_name: Optional[str] = None
    roll_number: Optional[str] = None
    class_name: Optional[str] = None
    section: Optional[str] = None


class ScanState(str, Enum):
    IDLE = "IDLE"
    ACTIVE = "ACTIVE"


class ScanOutcomeKind(str, Enum):
    COOLDOWN = "COOLDOWN"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    MARKED_PRESENT = "MARKED_PRESENT"
    STORAGE_ERROR = "STORAGE_ERROR"
    DEVICE_ERROR = "DEVICE_ERROR"
    TRANSIENT_ERROR = "TRANSIENT_ERROR"


class ScanOutcome(BaseModel):
    """Résultat d'un identifiant décodé ou d'un signal d'erreur du lecteur."""

    kind: ScanOutcomeKind
    message: str
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    event: Optional[PresenceEvent] = None


class DecodeRequest(BaseModel):
    text: str


class DeviceErrorRequest(BaseModel):
    message: str


class ScanStatus(BaseModel):
    state: ScanState
    last_device_error: Optional[str] = None
