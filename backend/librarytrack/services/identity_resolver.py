"""
Résolution d'un identifiant scanné ou saisi vers l'étudiant enregistré.
"""

from librarytrack.exceptions import IdentityNotFound
from librarytrack.models.student import Student


def normalize_id(raw_id: str) -> str:
    """Identifiant comparable : sans espaces autour, en minuscules."""
    return (raw_id or "").strip().lower()


def resolve(store, raw_id: str) -> Student:
    """
    Retourne l'étudiant dont l'identifiant correspond à raw_id
    (insensible à la casse et aux espaces). Aucun effet de bord.

    Lève IdentityNotFound avec l'identifiant normalisé sinon.
    """
    student_id = normalize_id(raw_id)
    student = store.find_by_id(student_id) if student_id else None
    if student is None:
        raise IdentityNotFound(student_id)
    return student
