"""
Registre d'identité des élèves.

La collection complète est relue à chaque appel et réécrite à chaque ajout :
le blob store reste la seule source de vérité. Aucune mise à jour ni
suppression unitaire (l'id d'un élève est immuable et jamais réutilisé).
Une fiche stockée invalide est ignorée à la lecture mais conservée à l'écriture.
"""

import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from qrattendance.schemas.student import StudentRecord
from qrattendance.services.blob_store import BlobStore, CorruptCollectionError, dump_rows, load_rows

logger = logging.getLogger(__name__)

_student_adapter = TypeAdapter(StudentRecord)


class StudentStore:
    def __init__(self, blob_store: BlobStore, key: str) -> None:
        self._blob_store = blob_store
        self._key = key

    def all(self) -> List[StudentRecord]:
        """Retourne tous les élèves valides dans l'ordre d'enregistrement."""
        try:
            rows = load_rows(self._blob_store, self._key)
        except CorruptCollectionError as exc:
            logger.error("Collection élèves illisible, traitée comme vide : %s", exc)
            return []

        students = []
        for index, row in enumerate(rows):
            try:
                students.append(_student_adapter.validate_python(row))
            except ValidationError as exc:
                logger.warning("Fiche élève n°%d de %s invalide, ignorée : %s", index, self._key, exc)
        return students

    def find_by_id(self, student_id: str) -> Optional[StudentRecord]:
        return next((s for s in self.all() if s.id == student_id), None)

    def add(self, record: StudentRecord) -> None:
        """
        Ajoute un élève et persiste la collection.
        L'unicité de l'id est garantie à la construction (uuid4), pas ici.
        Lève StorageError si l'écriture échoue ou si la collection stockée est illisible.
        """
        rows = load_rows(self._blob_store, self._key)
        rows.append(record.model_dump(mode="json", by_alias=True))
        self._blob_store.set(self._key, dump_rows(rows))
        logger.info("Élève enregistré : %s (%s)", record.id, record.name)

    def clear(self) -> None:
        """Supprime tous les élèves (remise à zéro administrative)."""
        self._blob_store.delete(self._key)
        logger.warning("Collection élèves %s supprimée.", self._key)
