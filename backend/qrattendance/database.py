"""
Configuration de la connexion à la base de données.
Une seule table clé → collection sérialisée (voir models/collection.py).
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from qrattendance.config import settings

# SQLite refuse par défaut le partage de connexion entre threads (pool FastAPI)
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    """Crée les tables manquantes (pas de migrations : schéma unique et stable)."""
    Base.metadata.create_all(bind=engine)
