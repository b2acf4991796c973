"""
Session de scan des QR codes élèves.

Machine à états IDLE → ACTIVE → IDLE. Pendant ACTIVE, chaque identifiant
décodé par le lecteur passe par les étapes suivantes (la première qui
s'applique termine le traitement) :
  1. Anti-rebond : identifiant déjà traité il y a moins de cooldown_seconds
     → ignoré (le lecteur relit le même code plusieurs fois par seconde)
  2. Élève introuvable dans le registre → NOT_FOUND
  3. Présence déjà enregistrée aujourd'hui → DUPLICATE
  4. Enregistrement d'une nouvelle présence → MARKED_PRESENT

Les étapes 2 à 4 placent l'identifiant dans la fenêtre anti-rebond, quel que
soit le résultat. Une erreur de stockage est un résultat (STORAGE_ERROR), pas
une exception : la session reste active et le scan pourra être retenté.

Hypothèse : un seul on_decode à la fois. Les routes de scan le garantissent
avec un verrou asyncio partagé (app.state.scan_lock).
"""

import logging
import uuid
from typing import Dict, List, Optional

from qrattendance.schemas.attendance import (
    PresenceEvent,
    ScanOutcome,
    ScanOutcomeKind,
    ScanState,
    ScanStatus,
)
from qrattendance.services.blob_store import StorageError
from qrattendance.services.clock import Clock, SystemClock
from qrattendance.services.ledger import Ledger
from qrattendance.services.student_store import StudentStore

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 3.0

# Messages du lecteur qui signalent une caméra indisponible ou refusée
FATAL_DEVICE_MARKERS = (
    "no video device",
    "permission denied",
    "notallowederror",
    "notfounderror",
    "notreadableerror",
)


def is_fatal_device_error(message: str) -> bool:
    """Distingue une panne caméra/permission d'un simple « aucun QR code trouvé »."""
    lowered = message.lower()
    return any(marker in lowered for marker in FATAL_DEVICE_MARKERS)


class ScanSession:
    def __init__(
        self,
        students: StudentStore,
        ledger: Ledger,
        clock: Optional[Clock] = None,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
    ) -> None:
        self._students = students
        self._ledger = ledger
        self._clock = clock or SystemClock()
        self._cooldown_seconds = cooldown_seconds
        self._recent: Dict[str, float] = {}
        self._state = ScanState.IDLE
        self._last_device_error: Optional[str] = None

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == ScanState.ACTIVE

    def status(self) -> ScanStatus:
        return ScanStatus(state=self._state, last_device_error=self._last_device_error)

    def start(self) -> None:
        if self.is_active:
            return
        self._state = ScanState.ACTIVE
        self._last_device_error = None
        logger.info("Session de scan démarrée.")

    def stop(self) -> None:
        """Arrête la session. Sans effet sur le journal : une présence est écrite en entier ou pas du tout."""
        if self._state == ScanState.IDLE:
            return
        self._state = ScanState.IDLE
        self._recent.clear()
        logger.info("Session de scan arrêtée.")

    def on_decode(self, text: str) -> ScanOutcome:
        """
        Traite un identifiant décodé par le lecteur.
        Lève ValueError si la session n'est pas active.
        """
        if not self.is_active:
            raise ValueError("Session de scan inactive : démarrez le scan avant de lire un QR code.")

        now = self._clock.monotonic()
        last_seen = self._recent.get(text)
        if last_seen is not None and now - last_seen < self._cooldown_seconds:
            logger.debug("QR %s relu pendant l'anti-rebond, ignoré.", text)
            return ScanOutcome(
                kind=ScanOutcomeKind.COOLDOWN,
                message=f"L'élève {text} vient d'être scanné. En attente du prochain QR code.",
                student_id=text,
            )

        self._recent[text] = now
        self._purge_cooldown(now)

        try:
            return self._process(text)
        except StorageError as exc:
            logger.error("Présence non enregistrée pour %s : %s", text, exc)
            return ScanOutcome(
                kind=ScanOutcomeKind.STORAGE_ERROR,
                message="Impossible d'enregistrer la présence. Veuillez réessayer.",
                student_id=text,
            )

    def on_error(self, message: str) -> ScanOutcome:
        """
        Traite un signal d'erreur du lecteur.
        Erreur caméra/permission → retour à IDLE. Toute autre erreur est transitoire.
        """
        if is_fatal_device_error(message):
            self._last_device_error = message
            self.stop()
            logger.error("Erreur caméra, session arrêtée : %s", message)
            return ScanOutcome(
                kind=ScanOutcomeKind.DEVICE_ERROR,
                message=(
                    f"Erreur caméra : {message}. Vérifiez que la caméra est connectée "
                    "et que l'accès est autorisé."
                ),
            )

        logger.debug("Erreur de lecture transitoire ignorée : %s", message)
        return ScanOutcome(kind=ScanOutcomeKind.TRANSIENT_ERROR, message=message)

    def today_attendance(self) -> List[PresenceEvent]:
        """Présences du jour courant de l'horloge injectée, dans l'ordre de stockage."""
        return self._ledger.by_date(self._clock.now().strftime("%Y-%m-%d"))

    def _process(self, text: str) -> ScanOutcome:
        student = self._students.find_by_id(text)
        if student is None:
            logger.warning("QR scanné inconnu : %s", text)
            return ScanOutcome(
                kind=ScanOutcomeKind.NOT_FOUND,
                message=f"Élève {text} introuvable.",
                student_id=text,
            )

        now = self._clock.now()
        today = now.strftime("%Y-%m-%d")
        if self._ledger.has_present_today(text, today):
            return ScanOutcome(
                kind=ScanOutcomeKind.DUPLICATE,
                message=(
                    f"L'élève « {student.name} » (rôle {student.roll_number}) "
                    "est déjà marqué présent aujourd'hui."
                ),
                student_id=text,
                student_name=student.name,
            )

        event = PresenceEvent(
            id=str(uuid.uuid4()),
            student_id=text,
            date=today,
            status="present",
            time=now.strftime("%H:%M:%S"),
        )
        self._ledger.record(event)
        return ScanOutcome(
            kind=ScanOutcomeKind.MARKED_PRESENT,
            message=f"Présence enregistrée pour « {student.name} » (rôle {student.roll_number}).",
            student_id=text,
            student_name=student.name,
            event=event,
        )

    def _purge_cooldown(self, now: float) -> None:
        expired = [k for k, t in self._recent.items() if now - t >= self._cooldown_seconds]
        for key in expired:
            del self._recent[key]
