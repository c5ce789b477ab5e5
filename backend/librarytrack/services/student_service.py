"""
Service métier pour la gestion des étudiants.
L'unicité de l'identifiant est vérifiée sans tenir compte de la casse.
"""

import logging
import re
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from librarytrack.models.student import STAFF_BRANCH, YEARS_OF_STUDY, Student
from librarytrack.schemas.student import (
    ExtractedIdData,
    StudentCreate,
    StudentPrefill,
    StudentResponse,
    StudentUpdate,
)
from librarytrack.services import branch_service
from librarytrack.services.identity_resolver import normalize_id
from librarytrack.services.stores import SqlStudentStore

logger = logging.getLogger(__name__)


def get_students(db: Session, search: Optional[str] = None) -> List[StudentResponse]:
    """Retourne les étudiants triés par nom, filtrés sur nom / id / n° d'inscription."""
    query = select(Student).order_by(Student.name)
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        query = query.where(or_(
            func.lower(Student.name).like(pattern),
            func.lower(Student.id).like(pattern),
            func.lower(Student.enroll_no).like(pattern),
        ))
    return [to_response(s) for s in db.execute(query).scalars().all()]


def get_student(db: Session, student_id: str) -> Optional[Student]:
    return SqlStudentStore(db).find_by_id(student_id)


def create_student(db: Session, data: StudentCreate) -> StudentResponse:
    """
    Crée un étudiant (console admin ou auto-enregistrement).
    Lève ValueError si l'identifiant existe déjà.
    """
    if get_student(db, data.id) is not None:
        raise ValueError(f"L'identifiant {data.id.upper()} est déjà utilisé.")

    student = Student(
        id=data.id,
        name=data.name,
        branch=data.branch,
        enroll_no=data.enroll_no,
        year_of_study=data.year_of_study,
        id_card_image=data.id_card_image,
    )
    db.add(student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError(f"L'identifiant {data.id.upper()} est déjà utilisé.")
    db.refresh(student)
    logger.info("Étudiant créé : %s (%s)", student.id, student.name)
    return to_response(student)


def update_student(db: Session, student_id: str, data: StudentUpdate) -> Optional[StudentResponse]:
    """
    Met à jour les champs fournis. Retourne None si l'étudiant est introuvable.

    Un nouvel `id` ne doit pas appartenir à un autre étudiant. Le journal n'est
    pas réécrit : les passages passés gardent l'ancien identifiant et l'ancien nom.
    """
    student = get_student(db, student_id)
    if student is None:
        return None

    update_data = data.model_dump(exclude_unset=True)
    new_id = update_data.get("id")
    if new_id is not None and normalize_id(new_id) != normalize_id(student.id):
        if get_student(db, new_id) is not None:
            raise ValueError(f"L'identifiant {new_id.upper()} est déjà utilisé par un autre étudiant.")

    for field, value in update_data.items():
        setattr(student, field, value)
    try:
        _check_staff_requirements(student)
    except ValueError:
        db.rollback()
        raise

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Cet identifiant est déjà utilisé par un autre étudiant.")
    db.refresh(student)
    return to_response(student)


def delete_student(db: Session, student_id: str) -> bool:
    """Supprime l'étudiant. Ses passages restent dans le journal."""
    student = get_student(db, student_id)
    if student is None:
        return False
    db.delete(student)
    db.commit()
    logger.info("Étudiant supprimé : %s", student_id)
    return True


def _check_staff_requirements(student: Student) -> None:
    if student.branch == STAFF_BRANCH:
        return
    if not student.enroll_no:
        raise ValueError("Le numéro d'inscription est obligatoire (sauf pour Staff).")
    if student.year_of_study not in YEARS_OF_STUDY:
        raise ValueError("L'année d'étude est obligatoire (sauf pour Staff).")


def to_response(student: Student) -> StudentResponse:
    return StudentResponse(
        id=student.id,
        name=student.name,
        branch=student.branch,
        enroll_no=student.enroll_no,
        year_of_study=student.year_of_study,
        has_id_card_image=bool(student.id_card_image),
        created_at=student.created_at,
    )


# ----------------------------------------------------------------
# Pré-remplissage depuis une carte lue par l'IA
# ----------------------------------------------------------------

def map_year_of_study(value: Optional[str]) -> Optional[str]:
    """'First Year', 'fy', '1' → 'FY' ; None si non reconnu."""
    if not value:
        return None
    upper = re.sub(r"[^A-Z0-9]", "", value.upper())
    if upper in YEARS_OF_STUDY:
        return upper
    if "FIRST" in upper or "FY" in upper or upper == "1":
        return "FY"
    if "SECOND" in upper or "SY" in upper or upper == "2":
        return "SY"
    if "THIRD" in upper or "TY" in upper or upper == "3":
        return "TY"
    return None


def map_branch(db: Session, value: Optional[str]) -> Optional[str]:
    """Aligne sur une filière connue (casse ignorée), sinon garde le texte libre."""
    if not value or not value.strip():
        return None
    if value.strip().lower() == STAFF_BRANCH.lower():
        return STAFF_BRANCH
    known = branch_service.find_branch(db, value)
    return known.name if known is not None else value.strip()


def build_prefill(db: Session, extracted: ExtractedIdData) -> StudentPrefill:
    """Construit le formulaire pré-rempli et liste les champs à compléter à la main."""
    prefill = StudentPrefill(
        id=extracted.id_number,
        name=extracted.student_name,
        branch=map_branch(db, extracted.branch),
        enroll_no=extracted.enroll_no,
        year_of_study=map_year_of_study(extracted.year_of_study),
        missing_fields=[],
    )
    required = ["id", "name", "branch"]
    if prefill.branch != STAFF_BRANCH:
        required += ["enroll_no", "year_of_study"]
    prefill.missing_fields = [f for f in required if not getattr(prefill, f)]
    return prefill
