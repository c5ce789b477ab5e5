"""
Router pour le journal des passages et le tableau de bord.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from librarytrack.database import get_db
from librarytrack.models.entry_log import ENTRY_TYPES
from librarytrack.schemas.entry_log import DashboardStats, EntryLogResponse
from librarytrack.services import log_service
from librarytrack.services.log_history import last_event_for
from librarytrack.services.stores import SqlLogStore

router = APIRouter(prefix="/api/v1", tags=["Journal"])


@router.get("/logs", response_model=List[EntryLogResponse], summary="Consulter le journal")
def list_logs(
    search: Optional[str] = None,
    branch: Optional[str] = None,
    type: Optional[str] = Query(default=None, description="Entry ou Exit"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    """Passages filtrés, du plus récent au plus ancien. `date_to` est inclus en entier."""
    if type is not None and type not in ENTRY_TYPES:
        raise HTTPException(status_code=422, detail=f"Type invalide. Valeurs acceptées : {ENTRY_TYPES}")
    if date_from and date_to and date_from > date_to:
        raise HTTPException(status_code=422, detail="date_from doit précéder date_to.")
    return log_service.get_logs(db, search, branch, type, date_from, date_to)


@router.get(
    "/logs/students/{student_id}/last",
    response_model=EntryLogResponse,
    summary="Dernier passage d'un étudiant",
)
def last_log_for_student(student_id: str, db: Session = Depends(get_db)):
    log = last_event_for(SqlLogStore(db), student_id)
    if log is None:
        raise HTTPException(status_code=404, detail="Aucun passage pour cet étudiant.")
    return log


@router.get("/dashboard", response_model=DashboardStats, summary="Statistiques du jour")
def dashboard(db: Session = Depends(get_db)):
    """Nombre d'étudiants, entrées du jour, étudiants actuellement présents."""
    return log_service.get_dashboard_stats(db)
