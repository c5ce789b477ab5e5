"""
Schémas Pydantic pour la console d'administration (identifiants, paramètres).
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

MIN_API_KEY_LENGTH = 10


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    authenticated: bool
    username: str


class CredentialsUpdate(BaseModel):
    username: str
    password: str

    @field_validator("username", "password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("L'identifiant et le mot de passe ne peuvent pas être vides.")
        return v.strip()


class SettingsUpdate(BaseModel):
    """Champs absents = inchangés."""
    min_scan_interval_seconds: Optional[int] = Field(default=None, ge=0)
    gemini_api_key: Optional[str] = None

    @field_validator("gemini_api_key")
    @classmethod
    def api_key_plausible(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v.strip()) < MIN_API_KEY_LENGTH:
            raise ValueError("Clé API invalide.")
        return v.strip() if v else v


class SettingsResponse(BaseModel):
    min_scan_interval_seconds: int
    gemini_api_key_configured: bool
    gemini_api_key_hint: Optional[str]   # 4 derniers caractères seulement
