"""
Configuration partagée pour tous les tests.
Remplace le blob store SQL par un InMemoryBlobStore : aucune écriture disque.
"""

import os

# Doit précéder l'import de l'application (Settings lu à l'import)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "development"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from qrattendance.dependencies import get_blob_store
from qrattendance.main import app
from qrattendance.services.blob_store import InMemoryBlobStore


class FakeClock:
    """Horloge pilotable : now() pour dater les présences, monotonic() pour l'anti-rebond."""

    def __init__(self, now=None, monotonic=1000.0):
        self.current = now or datetime(2024, 1, 10, 8, 15, 0)
        self.seconds = monotonic

    def now(self):
        return self.current

    def monotonic(self):
        return self.seconds

    def advance(self, seconds):
        self.seconds += seconds


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def client(blob_store):
    """Client HTTP de test avec un stockage en mémoire."""
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
