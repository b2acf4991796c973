"""
Schémas Pydantic pour les rapports de présence sur une période.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel

from qrattendance.schemas.attendance import PresenceEvent


class StudentAttendance(BaseModel):
    """Statistiques d'un élève sur la période demandée."""

    name: str
    gender: Optional[str] = None
    present_days: int
    total_days: int
    percentage: float
    history: List[PresenceEvent]


class AttendanceReport(BaseModel):
    """Rapport calculé à la demande, jamais persisté."""

    start_date: str
    end_date: str
    total_students: int
    total_present_in_period: int
    total_absent_in_period: int
    girls_present_in_period: int
    girls_absent_in_period: int
    boys_present_in_period: int
    boys_absent_in_period: int
    individual_attendance: Dict[str, StudentAttendance]
