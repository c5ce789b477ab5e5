"""
Router pour le référentiel des filières.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from librarytrack.database import get_db
from librarytrack.schemas.branch import BranchCreate, BranchResponse, BranchUpdate
from librarytrack.services import branch_service

router = APIRouter(prefix="/api/v1/branches", tags=["Filières"])


@router.get("", response_model=List[BranchResponse], summary="Lister les filières")
def list_branches(db: Session = Depends(get_db)):
    return branch_service.get_branches(db)


@router.post("", response_model=BranchResponse, status_code=201, summary="Ajouter une filière")
def create_branch(data: BranchCreate, db: Session = Depends(get_db)):
    """Ajoute une filière. Retourne 409 si le nom existe déjà (casse ignorée)."""
    try:
        return branch_service.create_branch(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/{branch_id}", response_model=BranchResponse, summary="Renommer une filière")
def rename_branch(branch_id: int, data: BranchUpdate, db: Session = Depends(get_db)):
    """Renomme une filière. Les étudiants déjà enregistrés gardent l'ancien nom."""
    try:
        branch = branch_service.rename_branch(db, branch_id, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if branch is None:
        raise HTTPException(status_code=404, detail="Filière introuvable.")
    return branch


@router.delete("/{branch_id}", status_code=204, summary="Supprimer une filière")
def delete_branch(branch_id: int, db: Session = Depends(get_db)):
    """Supprime une filière du référentiel. Les étudiants qui la portent la conservent."""
    if not branch_service.delete_branch(db, branch_id):
        raise HTTPException(status_code=404, detail="Filière introuvable.")
