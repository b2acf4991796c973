# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant l'appel à create_all au démarrage de l'API.

from qrattendance.models.collection import StoredCollection  # noqa: F401
