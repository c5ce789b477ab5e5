"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Base de données (SQLite suffit pour un poste de bibliothèque unique)
    DATABASE_URL: str = "sqlite:///./librarytrack.db"

    # IA générative: détection de carte et extraction des champs
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 30.0

    # Règles de scan
    MIN_SCAN_INTERVAL_SECONDS: int = 10       # Délai minimum entre deux passages d'un même étudiant
    DETECTION_COOLDOWN_SECONDS: float = 2.0   # Pause après une image sans carte

    # Données initiales
    DEFAULT_BRANCHES: List[str] = ["Computer", "Electronic", "Civil", "Mechanical", "Electrical"]
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "password"

    # Rapport d'occupation quotidien
    SCHEDULER_ENABLED: bool = True
    OCCUPANCY_REPORT_HOUR: int = 20

    # Environnement
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
