"""
Router pour les rapports de présence.
La période par défaut (aujourd'hui) est déterminée ici, le calcul reste pur.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from qrattendance.dependencies import get_ledger, get_student_store
from qrattendance.schemas.attendance import DATE_RE
from qrattendance.schemas.report import AttendanceReport
from qrattendance.services.ledger import Ledger
from qrattendance.services.report_service import build_report, default_period
from qrattendance.services.student_store import StudentStore

router = APIRouter(prefix="/api/v1/reports", tags=["Rapports"])


@router.get("", response_model=AttendanceReport, summary="Rapport de présence sur une période")
def attendance_report(
    start_date: Optional[str] = Query(None, description="Début inclus, YYYY-MM-DD (défaut : aujourd'hui)"),
    end_date: Optional[str] = Query(None, description="Fin incluse, YYYY-MM-DD (défaut : aujourd'hui)"),
    store: StudentStore = Depends(get_student_store),
    ledger: Ledger = Depends(get_ledger),
):
    """
    Calcule les statistiques de présence sur [start_date, end_date] :
    totaux présents/absents, répartition filles/garçons, détail par élève.
    Une période inversée (début > fin) donne un rapport où tous sont absents.
    """
    for value in (start_date, end_date):
        if value is not None and not DATE_RE.match(value):
            raise HTTPException(status_code=400, detail="Date invalide : format attendu YYYY-MM-DD.")

    today_start, today_end = default_period(date.today())
    return build_report(
        store.all(),
        ledger.all(),
        start_date or today_start,
        end_date or today_end,
    )
