"""
Calcul des statistiques de présence sur une période [start_date, end_date].

Fonction pure : mêmes entrées → même rapport, aucune lecture d'horloge ni
d'I/O. Les dates sont comparées en chaîne, ce qui suppose le format
YYYY-MM-DD complété de zéros.

Règles :
- présent sur la période = au moins une présence `present` dans la période
- absent = élève du registre sans aucune présence `present` dans la période
- les présences orphelines (élève supprimé) ne comptent nulle part
- genre classé par mots-clés ; les genres non reconnus restent dans les totaux
  mais hors des compteurs filles/garçons
"""

import re
from datetime import date
from typing import Dict, List, Optional, Sequence, Set, Tuple

from qrattendance.schemas.attendance import PresenceEvent
from qrattendance.schemas.report import AttendanceReport, StudentAttendance
from qrattendance.schemas.student import StudentRecord

FEMALE_TOKENS = {"female", "girl", "g"}
MALE_TOKENS = {"male", "boy", "b"}

_TOKEN_RE = re.compile(r"[a-z]+")


def classify_gender(gender: Optional[str]) -> Optional[str]:
    """Retourne "female", "male" ou None (non classé)."""
    tokens = set(_TOKEN_RE.findall((gender or "").lower()))
    if tokens & FEMALE_TOKENS:
        return "female"
    if tokens & MALE_TOKENS:
        return "male"
    return None


def default_period(today: date) -> Tuple[str, str]:
    """Période par défaut : la journée en cours (date fournie par l'appelant)."""
    day = today.isoformat()
    return day, day


def build_report(
    students: Sequence[StudentRecord],
    events: Sequence[PresenceEvent],
    start_date: str,
    end_date: str,
) -> AttendanceReport:
    in_period = [e for e in events if start_date <= e.date <= end_date]

    roster_ids = {s.id for s in students}
    present_ids: Set[str] = {
        e.student_id for e in in_period
        if e.status == "present" and e.student_id in roster_ids
    }

    counts = {"female": [0, 0], "male": [0, 0]}  # [présents, absents]
    for student in students:
        bucket = classify_gender(student.gender)
        if bucket is not None:
            counts[bucket][0 if student.id in present_ids else 1] += 1

    by_student: Dict[str, List[PresenceEvent]] = {}
    for event in in_period:
        by_student.setdefault(event.student_id, []).append(event)

    individual: Dict[str, StudentAttendance] = {}
    for student in students:
        history = sorted(by_student.get(student.id, []), key=lambda e: (e.date, e.time))
        present_days = len({e.date for e in history if e.status == "present"})
        total_days = len({e.date for e in history})
        percentage = round(present_days / total_days * 100, 2) if total_days > 0 else 0.0
        individual[student.id] = StudentAttendance(
            name=student.name,
            gender=student.gender,
            present_days=present_days,
            total_days=total_days,
            percentage=percentage,
            history=history,
        )

    total_students = len(students)
    total_present = len(present_ids)
    return AttendanceReport(
        start_date=start_date,
        end_date=end_date,
        total_students=total_students,
        total_present_in_period=total_present,
        total_absent_in_period=total_students - total_present,
        girls_present_in_period=counts["female"][0],
        girls_absent_in_period=counts["female"][1],
        boys_present_in_period=counts["male"][0],
        boys_absent_in_period=counts["male"][1],
        individual_attendance=individual,
    )
