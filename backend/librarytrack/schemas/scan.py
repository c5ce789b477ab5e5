"""
Schémas Pydantic pour le poste de scan.
Endpoints : POST /api/v1/scans/manual, POST /api/v1/scans/frame
"""

from typing import Optional

from pydantic import BaseModel, field_validator

from librarytrack.schemas.entry_log import EntryLogResponse
from librarytrack.schemas.student import StudentResponse


class ManualScanRequest(BaseModel):
    """Identifiant saisi au clavier quand la carte ne passe pas."""
    student_id: str

    @field_validator("student_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Veuillez saisir un identifiant étudiant.")
        return v


class FrameScanRequest(BaseModel):
    """Image capturée par la caméra du poste (data URI base64)."""
    image: str

    @field_validator("image")
    @classmethod
    def image_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("L'image ne peut pas être vide.")
        return v.strip()


class CardDetection(BaseModel):
    is_id_card: bool = False


class ScanResult(BaseModel):
    """Résultat d'un passage enregistré, affiché par le poste."""
    log: EntryLogResponse
    student: StudentResponse
    image_match: Optional[bool]
    verdict: str                   # match, mismatch, inconclusive
    message: str


class ScannerStatus(BaseModel):
    scanning: bool
    busy: bool
