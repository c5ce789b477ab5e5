"""
Service de la console d'administration : identifiant unique et paramètres.
Les mots de passe sont hachés avec werkzeug.security.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from librarytrack.config import settings
from librarytrack.models.admin import AdminCredential
from librarytrack.models.app_setting import AppSetting
from librarytrack.schemas.admin import CredentialsUpdate, SettingsResponse, SettingsUpdate

logger = logging.getLogger(__name__)

SETTING_MIN_INTERVAL = "min_scan_interval_seconds"
SETTING_API_KEY = "gemini_api_key"


# ----------------------------------------------------------------
# Paramètres
# ----------------------------------------------------------------

def get_setting(db: Session, key: str, default: Optional[str] = None) -> Optional[str]:
    """Valeur stockée en base, ou default si absente."""
    row = db.get(AppSetting, key)
    if row is None or row.value is None:
        return default
    return row.value


def set_setting(db: Session, key: str, value: str) -> None:
    row = db.get(AppSetting, key)
    if row is None:
        db.add(AppSetting(key=key, value=value))
    else:
        row.value = value
    db.commit()


def get_min_interval(db: Session) -> int:
    """Délai minimum entre deux passages (secondes) ; la base prime sur l'environnement."""
    value = get_setting(db, SETTING_MIN_INTERVAL)
    if value is None:
        return settings.MIN_SCAN_INTERVAL_SECONDS
    try:
        return int(value)
    except ValueError:
        logger.warning("Paramètre %s invalide en base (%r), valeur par défaut utilisée.",
                       SETTING_MIN_INTERVAL, value)
        return settings.MIN_SCAN_INTERVAL_SECONDS


def get_api_key(db: Session) -> str:
    return get_setting(db, SETTING_API_KEY) or settings.GEMINI_API_KEY


def get_settings(db: Session) -> SettingsResponse:
    api_key = get_api_key(db)
    return SettingsResponse(
        min_scan_interval_seconds=get_min_interval(db),
        gemini_api_key_configured=bool(api_key),
        gemini_api_key_hint=f"…{api_key[-4:]}" if api_key else None,
    )


def update_settings(db: Session, data: SettingsUpdate) -> SettingsResponse:
    """Met à jour les paramètres fournis."""
    if data.min_scan_interval_seconds is not None:
        set_setting(db, SETTING_MIN_INTERVAL, str(data.min_scan_interval_seconds))
        logger.info("Délai minimum entre passages : %d s", data.min_scan_interval_seconds)
    if data.gemini_api_key is not None:
        set_setting(db, SETTING_API_KEY, data.gemini_api_key)
        logger.info("Clé API Gemini mise à jour.")
    return get_settings(db)


# ----------------------------------------------------------------
# Identifiant administrateur
# ----------------------------------------------------------------

def _get_credential(db: Session) -> Optional[AdminCredential]:
    return db.execute(select(AdminCredential).order_by(AdminCredential.id)).scalars().first()


def ensure_admin_credentials(db: Session) -> None:
    """Crée l'identifiant par défaut s'il n'existe encore aucun compte."""
    if _get_credential(db) is not None:
        return
    db.add(AdminCredential(
        username=settings.DEFAULT_ADMIN_USERNAME,
        password_hash=generate_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
    ))
    db.commit()
    logger.info("Identifiant administrateur par défaut créé (%s).", settings.DEFAULT_ADMIN_USERNAME)


def verify_credentials(db: Session, username: str, password: str) -> bool:
    credential = _get_credential(db)
    if credential is None:
        return False
    if credential.username != username or not check_password_hash(credential.password_hash, password):
        logger.warning("Échec de connexion administrateur pour %r", username)
        return False

    credential.last_login = datetime.now(timezone.utc)
    db.commit()
    return True


def update_credentials(db: Session, data: CredentialsUpdate) -> str:
    """Remplace l'identifiant et le mot de passe. Retourne le nouvel identifiant."""
    credential = _get_credential(db)
    if credential is None:
        credential = AdminCredential(username=data.username, password_hash="")
        db.add(credential)

    credential.username = data.username
    credential.password_hash = generate_password_hash(data.password)
    db.commit()
    logger.info("Identifiants administrateur modifiés (%s).", data.username)
    return data.username
