"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Base de données (stockage clé → collection sérialisée)
    DATABASE_URL: str = "sqlite:///./qrattendance.db"

    # Clés des collections persistées
    STUDENTS_KEY: str = "smartSchoolQRAttendance_students"
    ATTENDANCE_KEY: str = "smartSchoolQRAttendance_attendance"

    # Session de scan : un même QR relu pendant ce délai est ignoré
    SCAN_COOLDOWN_SECONDS: float = 3.0

    # OCR des cartes d'élève (Gemini Vision)
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash-image"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    OCR_TIMEOUT_SECONDS: float = 30.0
    MAX_UPLOAD_SIZE_MB: int = 5

    # Journalisation
    LOG_LEVEL: str = "INFO"

    # Environnement
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
