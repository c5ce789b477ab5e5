"""
Service métier pour le référentiel des filières.

Supprimer ou renommer une filière ne modifie pas les étudiants :
leur valeur reste valable en texte libre (filière personnalisée).
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from librarytrack.config import settings
from librarytrack.models.branch import Branch
from librarytrack.models.student import STAFF_BRANCH, Student
from librarytrack.schemas.branch import BranchCreate, BranchUpdate

logger = logging.getLogger(__name__)


def get_branches(db: Session) -> List[Branch]:
    """Retourne les filières dans leur ordre de création."""
    return db.execute(select(Branch).order_by(Branch.id)).scalars().all()


def find_branch(db: Session, name: str) -> Optional[Branch]:
    """Recherche insensible à la casse."""
    return db.execute(
        select(Branch).where(func.lower(Branch.name) == name.strip().lower())
    ).scalar()


def seed_default_branches(db: Session) -> None:
    """Insère les filières par défaut si le référentiel est vide."""
    if db.execute(select(func.count()).select_from(Branch)).scalar():
        return
    for name in settings.DEFAULT_BRANCHES:
        db.add(Branch(name=name))
    db.commit()
    logger.info("Filières par défaut créées : %s", ", ".join(settings.DEFAULT_BRANCHES))


def create_branch(db: Session, data: BranchCreate) -> Branch:
    """Ajoute une filière. Lève ValueError si le nom existe déjà."""
    if data.name.lower() == STAFF_BRANCH.lower() or find_branch(db, data.name) is not None:
        raise ValueError(f"La filière '{data.name}' existe déjà.")

    branch = Branch(name=data.name)
    db.add(branch)
    db.commit()
    db.refresh(branch)
    logger.info("Filière ajoutée : %s", branch.name)
    return branch


def rename_branch(db: Session, branch_id: int, data: BranchUpdate) -> Optional[Branch]:
    """Renomme une filière. Retourne None si introuvable, ValueError si le nom est pris."""
    branch = db.get(Branch, branch_id)
    if branch is None:
        return None

    existing = find_branch(db, data.name)
    if data.name.lower() == STAFF_BRANCH.lower() or (existing is not None and existing.id != branch.id):
        raise ValueError(f"Une autre filière porte déjà le nom '{data.name}'.")

    old_name = branch.name
    branch.name = data.name
    db.commit()
    db.refresh(branch)
    logger.info("Filière renommée : %s → %s", old_name, branch.name)
    return branch


def delete_branch(db: Session, branch_id: int) -> bool:
    """
    Supprime une filière du référentiel. Les étudiants qui la portent la gardent.
    Retourne True si supprimée, False si introuvable.
    """
    branch = db.get(Branch, branch_id)
    if branch is None:
        return False

    in_use = db.execute(
        select(func.count()).select_from(Student).where(Student.branch == branch.name)
    ).scalar() or 0

    db.delete(branch)
    db.commit()
    logger.info("Filière supprimée : %s (%d étudiant(s) la conservent)", branch.name, in_use)
    return True
