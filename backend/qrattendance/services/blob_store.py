"""
Stockage durable clé → collection sérialisée.

Le registre des élèves et le journal des présences y écrivent chacun leur
collection complète (tableau JSON) sous une clé fixe. Deux implémentations :
- SqlBlobStore : une ligne par clé dans la table stored_collections
- InMemoryBlobStore : dictionnaire en mémoire (tests, exécution éphémère)

load_rows / dump_rows lisent et écrivent le tableau brut : chaque ligne est
validée à part par l'appelant, une ligne invalide n'emporte pas les autres.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qrattendance.models.collection import StoredCollection

logger = logging.getLogger(__name__)

_rows_adapter = TypeAdapter(List[Any])


class StorageError(Exception):
    """L'écriture ou la lecture persistante n'a pas abouti."""


class CorruptCollectionError(StorageError):
    """Le contenu stocké n'est pas un tableau JSON : il ne doit pas être réécrit."""


class BlobStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, payload: str) -> None: ...

    def delete(self, key: str) -> None: ...


def load_rows(blob_store: BlobStore, key: str) -> List[Any]:
    """
    Retourne les lignes brutes de la collection ([] si la clé est absente).
    Lève CorruptCollectionError si le contenu n'est pas un tableau JSON.
    """
    payload = blob_store.get(key)
    if not payload:
        return []
    try:
        return _rows_adapter.validate_json(payload)
    except ValidationError as exc:
        raise CorruptCollectionError(f"Collection {key} illisible : {exc}") from exc


def dump_rows(rows: List[Any]) -> str:
    return _rows_adapter.dump_json(rows).decode()


class InMemoryBlobStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, payload: str) -> None:
        self._data[key] = payload

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlBlobStore:
    """
    Blob store adossé à SQLAlchemy.

    Chaque opération ouvre sa propre session et la ferme après usage : aucune
    transaction ne reste ouverte entre deux appels. Toute SQLAlchemyError est
    remontée sous forme de StorageError.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        db = self._session_factory()
        try:
            row = db.get(StoredCollection, key)
            return row.payload if row is not None else None
        except SQLAlchemyError as exc:
            logger.error("Lecture de la collection %s impossible : %s", key, exc)
            raise StorageError(f"Lecture de la collection {key} impossible.") from exc
        finally:
            db.close()

    def set(self, key: str, payload: str) -> None:
        db = self._session_factory()
        try:
            row = db.get(StoredCollection, key)
            if row is None:
                db.add(StoredCollection(key=key, payload=payload))
            else:
                row.payload = payload
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Écriture de la collection %s impossible : %s", key, exc)
            raise StorageError(f"Écriture de la collection {key} impossible.") from exc
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self._session_factory()
        try:
            row = db.get(StoredCollection, key)
            if row is not None:
                db.delete(row)
                db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Suppression de la collection %s impossible : %s", key, exc)
            raise StorageError(f"Suppression de la collection {key} impossible.") from exc
        finally:
            db.close()
