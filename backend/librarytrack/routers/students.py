"""
Router pour les étudiants.
Listage / création / modification / suppression depuis la console admin,
auto-enregistrement, et pré-remplissage depuis une photo de carte (IA).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from librarytrack.database import get_db
from librarytrack.schemas.student import (
    CardImageRequest,
    StudentCreate,
    StudentIdCard,
    StudentPrefill,
    StudentResponse,
    StudentUpdate,
)
from librarytrack.services import student_service
from librarytrack.services.gemini_client import GeminiClient, get_gemini_client

router = APIRouter(prefix="/api/v1/students", tags=["Étudiants"])


@router.get("", response_model=List[StudentResponse], summary="Lister les étudiants")
def list_students(search: Optional[str] = None, db: Session = Depends(get_db)):
    """Retourne les étudiants triés par nom. `search` filtre sur nom, identifiant ou n° d'inscription."""
    return student_service.get_students(db, search)


@router.post("", response_model=StudentResponse, status_code=201, summary="Enregistrer un étudiant")
def create_student(data: StudentCreate, db: Session = Depends(get_db)):
    """
    Crée un étudiant (console admin ou auto-enregistrement au poste de scan).
    Le numéro d'inscription et l'année sont facultatifs pour la filière Staff.
    Retourne 409 si l'identifiant existe déjà (casse ignorée).
    """
    try:
        return student_service.create_student(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/extract", response_model=StudentPrefill, summary="Lire une carte étudiant (IA)")
def extract_from_card(
    data: CardImageRequest,
    db: Session = Depends(get_db),
    client: GeminiClient = Depends(get_gemini_client),
):
    """
    Analyse la photo d'une carte et retourne un formulaire pré-rempli.
    Rien n'est enregistré : l'utilisateur vérifie puis soumet POST /students.
    """
    extracted = client.extract_card_fields(data.image)
    return student_service.build_prefill(db, extracted)


@router.get("/{student_id}", response_model=StudentResponse, summary="Détail d'un étudiant")
def get_student(student_id: str, db: Session = Depends(get_db)):
    student = student_service.get_student(db, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Étudiant introuvable.")
    return student_service.to_response(student)


@router.get("/{student_id}/id-card", response_model=StudentIdCard, summary="Photo de carte d'un étudiant")
def get_student_id_card(student_id: str, db: Session = Depends(get_db)):
    """Retourne la photo de référence enregistrée (data URI), ou null."""
    student = student_service.get_student(db, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Étudiant introuvable.")
    return StudentIdCard(id=student.id, id_card_image=student.id_card_image)


@router.put("/{student_id}", response_model=StudentResponse, summary="Modifier un étudiant")
def update_student(student_id: str, data: StudentUpdate, db: Session = Depends(get_db)):
    """
    Met à jour les champs fournis, y compris l'identifiant et la photo de carte.
    Retourne 404 si l'étudiant est introuvable, 409 si le nouvel identifiant est pris,
    400 si les champs obligatoires hors Staff manquent après modification.
    """
    try:
        student = student_service.update_student(db, student_id, data)
    except ValueError as e:
        msg = str(e)
        if "déjà utilisé" in msg:
            raise HTTPException(status_code=409, detail=msg)
        raise HTTPException(status_code=400, detail=msg)
    if student is None:
        raise HTTPException(status_code=404, detail="Étudiant introuvable.")
    return student


@router.delete("/{student_id}", status_code=204, summary="Supprimer un étudiant")
def delete_student(student_id: str, db: Session = Depends(get_db)):
    """Supprime définitivement un étudiant. Ses passages restent dans le journal."""
    if not student_service.delete_student(db, student_id):
        raise HTTPException(status_code=404, detail="Étudiant introuvable.")
