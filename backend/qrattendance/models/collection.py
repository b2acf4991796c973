"""
Modèle SQLAlchemy pour la table stored_collections.

Chaque ligne contient une collection complète (élèves ou présences) sérialisée
en JSON sous une clé fixe. Le schéma des entités vit côté Pydantic.
"""

from sqlalchemy import Column, DateTime, String, Text, func

from qrattendance.database import Base


class StoredCollection(Base):
    __tablename__ = "stored_collections"

    key = Column(String(100), primary_key=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
