"""
Router de la console d'administration : connexion, identifiants, paramètres.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from librarytrack.database import get_db
from librarytrack.schemas.admin import (
    CredentialsUpdate,
    LoginRequest,
    LoginResponse,
    SettingsResponse,
    SettingsUpdate,
)
from librarytrack.services import admin_service

router = APIRouter(prefix="/api/v1/admin", tags=["Administration"])


@router.post("/login", response_model=LoginResponse, summary="Vérifier les identifiants admin")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    if not admin_service.verify_credentials(db, data.username, data.password):
        raise HTTPException(status_code=401, detail="Identifiant ou mot de passe incorrect.")
    return LoginResponse(authenticated=True, username=data.username)


@router.put("/credentials", response_model=LoginResponse, summary="Modifier les identifiants admin")
def update_credentials(data: CredentialsUpdate, db: Session = Depends(get_db)):
    username = admin_service.update_credentials(db, data)
    return LoginResponse(authenticated=True, username=username)


@router.get("/settings", response_model=SettingsResponse, summary="Lire les paramètres")
def get_settings(db: Session = Depends(get_db)):
    """La clé API n'est jamais renvoyée en clair (4 derniers caractères)."""
    return admin_service.get_settings(db)


@router.put("/settings", response_model=SettingsResponse, summary="Modifier les paramètres")
def update_settings(data: SettingsUpdate, db: Session = Depends(get_db)):
    """Délai minimum entre deux passages (secondes) et clé API Gemini."""
    return admin_service.update_settings(db, data)
