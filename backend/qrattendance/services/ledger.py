"""
Journal des présences (append-only).

Règle d'unicité : au plus une présence `present` par (élève, jour).
Elle n'est PAS imposée par record() : c'est la session de scan qui appelle
has_present_today() avant d'écrire. L'import en masse de données historiques
passe donc sans filtre par jour, seulement avec idempotence sur l'id.

Une ligne stockée invalide est ignorée à la lecture mais conservée telle
quelle à l'écriture. Un contenu qui n'est pas un tableau JSON est lu comme
vide et n'est jamais réécrit (CorruptCollectionError).

Limite connue : la séquence vérification → ajout n'est pas atomique. Un seul
poste de scan actif par déploiement est supporté.
"""

import logging
from typing import Any, List

from pydantic import TypeAdapter, ValidationError

from qrattendance.schemas.attendance import AttendanceImportResult, PresenceEvent
from qrattendance.services.blob_store import BlobStore, CorruptCollectionError, dump_rows, load_rows

logger = logging.getLogger(__name__)

_event_adapter = TypeAdapter(PresenceEvent)


class Ledger:
    def __init__(self, blob_store: BlobStore, key: str) -> None:
        self._blob_store = blob_store
        self._key = key

    def all(self) -> List[PresenceEvent]:
        """Retourne toutes les présences valides dans l'ordre de stockage."""
        try:
            rows = load_rows(self._blob_store, self._key)
        except CorruptCollectionError as exc:
            logger.error("Journal des présences illisible, traité comme vide : %s", exc)
            return []
        return self._validate(rows)

    def by_date(self, date: str) -> List[PresenceEvent]:
        return [e for e in self.all() if e.date == date]

    def has_present_today(self, student_id: str, date: str) -> bool:
        return any(
            e.student_id == student_id and e.status == "present"
            for e in self.by_date(date)
        )

    def record(self, event: PresenceEvent) -> None:
        """
        Ajoute une présence sans condition.
        Lève StorageError si l'écriture échoue ou si le journal stocké est illisible.
        """
        rows = load_rows(self._blob_store, self._key)
        rows.append(event.model_dump(mode="json"))
        self._save(rows)
        logger.info("Présence enregistrée : élève %s le %s à %s", event.student_id, event.date, event.time)

    def import_events(self, incoming: List[PresenceEvent]) -> AttendanceImportResult:
        """
        Importe un lot de présences historiques en une seule écriture.

        Un id déjà stocké, ou déjà vu dans ce lot, est compté comme doublon et
        ignoré (aucune erreur levée). Aucune vérification par (élève, jour).
        """
        rows = load_rows(self._blob_store, self._key)
        known_ids = {e.id for e in self._validate(rows)}
        accepted: List[str] = []
        duplicate: List[str] = []

        for event in incoming:
            if event.id in known_ids:
                duplicate.append(event.id)
                logger.debug("Présence déjà connue, ignorée : %s", event.id)
                continue
            rows.append(event.model_dump(mode="json"))
            known_ids.add(event.id)
            accepted.append(event.id)

        if accepted:
            self._save(rows)

        logger.info(
            "Import présences : %d reçues, %d insérées, %d doublons",
            len(incoming), len(accepted), len(duplicate),
        )
        return AttendanceImportResult(
            accepted=accepted,
            duplicate=duplicate,
            total_received=len(incoming),
            total_inserted=len(accepted),
        )

    def clear(self) -> None:
        """Supprime toutes les présences (remise à zéro administrative)."""
        self._blob_store.delete(self._key)
        logger.warning("Journal des présences %s supprimé.", self._key)

    def _validate(self, rows: List[Any]) -> List[PresenceEvent]:
        events = []
        for index, row in enumerate(rows):
            try:
                events.append(_event_adapter.validate_python(row))
            except ValidationError as exc:
                logger.warning("Présence n°%d du journal %s invalide, ignorée : %s", index, self._key, exc)
        return events

    def _save(self, rows: List[Any]) -> None:
        self._blob_store.set(self._key, dump_rows(rows))
