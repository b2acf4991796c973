"""
Tests unitaires pour le journal des présences et le registre des élèves.
Couverture : ordre de stockage, has_present_today, import idempotent, lignes invalides,
collection illisible, persistance via le blob store.
"""

import json
import uuid

import pytest

from qrattendance.schemas.attendance import PresenceEvent
from qrattendance.schemas.student import StudentRecord
from qrattendance.services.blob_store import InMemoryBlobStore, StorageError
from qrattendance.services.ledger import Ledger
from qrattendance.services.student_store import StudentStore


# --- Helpers ---

def make_event(student_id="s1", date="2024-01-10", status="present", event_id=None) -> PresenceEvent:
    return PresenceEvent(
        id=event_id or str(uuid.uuid4()),
        student_id=student_id,
        date=date,
        status=status,
        time="08:15:00",
    )


def make_student(student_id="s1", name="Asha") -> StudentRecord:
    return StudentRecord(
        id=student_id,
        name=name,
        father_name="Ravi",
        school_name="Smart School",
        class_name="5th",
        section="A",
        roll_number="12",
        gender="Female",
        icard_image_url="",
        qr_image_url="",
        created_at="2024-01-01T08:00:00",
    )


# ============================================================
# Ledger
# ============================================================

class TestLedger:
    def test_journal_vide(self):
        ledger = Ledger(InMemoryBlobStore(), "att")

        assert ledger.all() == []
        assert ledger.by_date("2024-01-10") == []
        assert ledger.has_present_today("s1", "2024-01-10") is False

    def test_record_conserve_ordre(self):
        ledger = Ledger(InMemoryBlobStore(), "att")
        first = make_event("s1")
        second = make_event("s2")
        third = make_event("s3", date="2024-01-11")

        for event in (first, second, third):
            ledger.record(event)

        assert [e.id for e in ledger.all()] == [first.id, second.id, third.id]
        assert [e.id for e in ledger.by_date("2024-01-10")] == [first.id, second.id]

    def test_record_sans_controle_doublon(self):
        """record() ajoute sans condition : le contrôle par jour revient à l'appelant."""
        ledger = Ledger(InMemoryBlobStore(), "att")
        ledger.record(make_event("s1"))
        ledger.record(make_event("s1"))

        assert len(ledger.by_date("2024-01-10")) == 2

    def test_has_present_today(self):
        ledger = Ledger(InMemoryBlobStore(), "att")
        ledger.record(make_event("s1", date="2024-01-10"))
        ledger.record(make_event("s2", date="2024-01-10", status="absent"))

        assert ledger.has_present_today("s1", "2024-01-10") is True
        assert ledger.has_present_today("s1", "2024-01-11") is False
        assert ledger.has_present_today("s2", "2024-01-10") is False

    def test_persistance_partagee(self):
        """Deux instances sur le même blob store voient les mêmes présences."""
        store = InMemoryBlobStore()
        Ledger(store, "att").record(make_event("s1"))

        assert len(Ledger(store, "att").all()) == 1

    def test_collection_illisible_traitee_comme_vide(self):
        store = InMemoryBlobStore()
        store.set("att", "{pas du json")

        assert Ledger(store, "att").all() == []

    def test_clear(self):
        store = InMemoryBlobStore()
        ledger = Ledger(store, "att")
        ledger.record(make_event())
        ledger.clear()

        assert ledger.all() == []
        assert store.get("att") is None


class TestImportEvents:
    def test_import_nouveaux(self):
        ledger = Ledger(InMemoryBlobStore(), "att")
        events = [make_event("s1"), make_event("s2")]

        result = ledger.import_events(events)

        assert result.total_received == 2
        assert result.total_inserted == 2
        assert result.duplicate == []
        assert len(ledger.all()) == 2

    def test_import_idempotent_sur_id(self):
        ledger = Ledger(InMemoryBlobStore(), "att")
        existing = make_event("s1", event_id="evt-1")
        ledger.record(existing)

        result = ledger.import_events([make_event("s1", event_id="evt-1"), make_event("s2", event_id="evt-2")])

        assert result.accepted == ["evt-2"]
        assert result.duplicate == ["evt-1"]
        assert len(ledger.all()) == 2

    def test_import_doublon_intra_lot(self):
        ledger = Ledger(InMemoryBlobStore(), "att")

        result = ledger.import_events([make_event(event_id="evt-1"), make_event(event_id="evt-1")])

        assert result.total_inserted == 1
        assert result.duplicate == ["evt-1"]

    def test_import_meme_eleve_meme_jour_accepte(self):
        """L'import historique ne filtre pas par (élève, jour)."""
        ledger = Ledger(InMemoryBlobStore(), "att")

        result = ledger.import_events([make_event("s1"), make_event("s1")])

        assert result.total_inserted == 2


# ============================================================
# StudentStore
# ============================================================

class TestStudentStore:
    def test_ajout_et_recherche(self):
        store = StudentStore(InMemoryBlobStore(), "students")
        store.add(make_student("s1", "Asha"))
        store.add(make_student("s2", "Vikram"))

        assert [s.id for s in store.all()] == ["s1", "s2"]
        assert store.find_by_id("s2").name == "Vikram"
        assert store.find_by_id("inconnu") is None

    def test_serialisation_conserve_champ_class(self):
        blob_store = InMemoryBlobStore()
        StudentStore(blob_store, "students").add(make_student())

        assert '"class":"5th"' in blob_store.get("students")
        assert StudentStore(blob_store, "students").all()[0].class_name == "5th"

    def test_collection_illisible_traitee_comme_vide(self):
        blob_store = InMemoryBlobStore()
        blob_store.set("students", "[{\"id\": 1}]")

        assert StudentStore(blob_store, "students").all() == []


# ============================================================
# Lignes invalides et collection illisible
# ============================================================

def store_rows(blob_store, key, rows):
    blob_store.set(key, json.dumps(rows))


def valid_event_rows(count):
    return [make_event("s1", date=f"2024-01-{day:02d}").model_dump(mode="json") for day in range(1, count + 1)]


BAD_EVENT_ROW = {"id": "evt-bad", "student_id": "s1", "date": "2024-01-21", "status": "present", "time": "8:00"}


class TestLigneInvalide:
    def test_ledger_ignore_ligne_invalide(self):
        blob_store = InMemoryBlobStore()
        store_rows(blob_store, "att", valid_event_rows(20) + [BAD_EVENT_ROW])

        assert len(Ledger(blob_store, "att").all()) == 20

    def test_ledger_record_conserve_historique(self):
        blob_store = InMemoryBlobStore()
        store_rows(blob_store, "att", valid_event_rows(20) + [BAD_EVENT_ROW])
        ledger = Ledger(blob_store, "att")

        ledger.record(make_event("s1", date="2024-01-22"))

        assert len(ledger.all()) == 21
        assert len(json.loads(blob_store.get("att"))) == 22
        assert BAD_EVENT_ROW in json.loads(blob_store.get("att"))

    def test_ledger_import_conserve_historique(self):
        blob_store = InMemoryBlobStore()
        store_rows(blob_store, "att", valid_event_rows(3) + [BAD_EVENT_ROW])
        ledger = Ledger(blob_store, "att")

        result = ledger.import_events([make_event("s2")])

        assert result.total_inserted == 1
        assert len(ledger.all()) == 4

    def test_ledger_illisible_jamais_reecrit(self):
        blob_store = InMemoryBlobStore()
        blob_store.set("att", "{pas du json")
        ledger = Ledger(blob_store, "att")

        with pytest.raises(StorageError):
            ledger.record(make_event())
        with pytest.raises(StorageError):
            ledger.import_events([make_event()])

        assert blob_store.get("att") == "{pas du json"

    def test_ledger_objet_au_lieu_de_tableau(self):
        blob_store = InMemoryBlobStore()
        blob_store.set("att", '{"id": "evt-1"}')

        assert Ledger(blob_store, "att").all() == []

    def test_store_ignore_fiche_invalide(self):
        blob_store = InMemoryBlobStore()
        rows = [make_student(f"s{i}").model_dump(mode="json", by_alias=True) for i in range(3)]
        store_rows(blob_store, "students", rows + [{"id": 1}])

        assert [s.id for s in StudentStore(blob_store, "students").all()] == ["s0", "s1", "s2"]

    def test_store_add_conserve_registre(self):
        blob_store = InMemoryBlobStore()
        rows = [make_student(f"s{i}").model_dump(mode="json", by_alias=True) for i in range(3)]
        store_rows(blob_store, "students", rows + [{"id": 1}])
        store = StudentStore(blob_store, "students")

        store.add(make_student("s3"))

        assert len(store.all()) == 4
        assert len(json.loads(blob_store.get("students"))) == 5

    def test_store_illisible_jamais_reecrit(self):
        blob_store = InMemoryBlobStore()
        blob_store.set("students", "[{tronqué")

        with pytest.raises(StorageError):
            StudentStore(blob_store, "students").add(make_student())

        assert blob_store.get("students") == "[{tronqué"
