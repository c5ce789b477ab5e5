"""
Schémas Pydantic pour les étudiants.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

from librarytrack.models.student import STAFF_BRANCH

YearOfStudy = Literal["FY", "SY", "TY"]


class StudentCreate(BaseModel):
    """Schéma de création d'un étudiant (POST /students)."""
    id: str                               # Numéro sous le code-barres
    name: str
    branch: str
    enroll_no: Optional[str] = None
    year_of_study: Optional[YearOfStudy] = None
    id_card_image: Optional[str] = None   # Photo de la carte (data URI)

    @field_validator("id", "branch")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("name")
    @classmethod
    def name_long_enough(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Le nom doit contenir au moins 2 caractères.")
        return v.strip()

    @field_validator("enroll_no")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def staff_requirements(self) -> "StudentCreate":
        if self.branch != STAFF_BRANCH:
            if not self.enroll_no:
                raise ValueError("Le numéro d'inscription est obligatoire (sauf pour Staff).")
            if not self.year_of_study:
                raise ValueError("L'année d'étude est obligatoire (sauf pour Staff).")
        return self


class StudentUpdate(BaseModel):
    """
    Schéma de mise à jour (PUT /students/{id}). Les champs absents ne sont pas modifiés.
    Fournir `id` renomme l'étudiant ; les règles Staff sont vérifiées après fusion.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    branch: Optional[str] = None
    enroll_no: Optional[str] = None
    year_of_study: Optional[YearOfStudy] = None
    id_card_image: Optional[str] = None

    # Un null explicite est refusé : absent = inchangé, null = valeur invalide.
    @field_validator("id", "branch")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("name")
    @classmethod
    def name_long_enough(cls, v: Optional[str]) -> str:
        if v is None or len(v.strip()) < 2:
            raise ValueError("Le nom doit contenir au moins 2 caractères.")
        return v.strip()

    @field_validator("enroll_no")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class StudentResponse(BaseModel):
    """Schéma de réponse pour un étudiant (sans la photo, servie à part)."""
    id: str
    name: str
    branch: str
    enroll_no: Optional[str]
    year_of_study: Optional[str]
    has_id_card_image: bool
    created_at: Optional[datetime]


class StudentIdCard(BaseModel):
    id: str
    id_card_image: Optional[str]


class ExtractedIdData(BaseModel):
    """
    Champs lus par l'IA sur une carte. Tous optionnels :
    absent = non déterminé avec certitude, jamais deviné.
    """
    id_number: Optional[str] = None
    student_name: Optional[str] = None
    branch: Optional[str] = None
    enroll_no: Optional[str] = None
    year_of_study: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class CardImageRequest(BaseModel):
    """Photo de carte à analyser (data URI base64)."""
    image: str

    @field_validator("image")
    @classmethod
    def image_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("L'image ne peut pas être vide.")
        return v.strip()


class StudentPrefill(BaseModel):
    """Formulaire pré-rempli à partir d'une carte (enregistrement / modification)."""
    id: Optional[str] = None
    name: Optional[str] = None
    branch: Optional[str] = None
    enroll_no: Optional[str] = None
    year_of_study: Optional[YearOfStudy] = None
    missing_fields: List[str]
