"""
Configuration de la connexion à la base de données.
SQLite par défaut ; tout moteur supporté par SQLAlchemy via DATABASE_URL.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from librarytrack.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """Options spécifiques à SQLite : partage du thread et base mémoire unique."""
    if not url.startswith("sqlite"):
        return {}
    options = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI: fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Crée les tables manquantes puis insère les données initiales
    (filières par défaut, identifiants administrateur).
    Import local pour éviter les imports circulaires.
    """
    import librarytrack.models  # noqa: F401
    from librarytrack.services import admin_service, branch_service

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        branch_service.seed_default_branches(db)
        admin_service.ensure_admin_credentials(db)
    finally:
        db.close()
    logger.info("Base de données initialisée (%s).", engine.url.render_as_string(hide_password=True))
