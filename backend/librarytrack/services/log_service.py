"""
Consultation du journal des passages et statistiques du tableau de bord.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from librarytrack.models.entry_log import ENTRY, EntryLog
from librarytrack.models.student import Student
from librarytrack.schemas.entry_log import DashboardStats
from librarytrack.services.identity_resolver import normalize_id

logger = logging.getLogger(__name__)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def get_logs(
    db: Session,
    search: Optional[str] = None,
    branch: Optional[str] = None,
    entry_type: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[EntryLog]:
    """
    Retourne les passages filtrés, du plus récent au plus ancien.

    - search : nom ou identifiant étudiant (contient, casse ignorée)
    - date_to : journée incluse en entier (UTC)
    """
    query = select(EntryLog).order_by(EntryLog.timestamp.desc())

    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        query = query.where(or_(
            func.lower(EntryLog.student_name).like(pattern),
            func.lower(EntryLog.student_id).like(pattern),
        ))
    if branch:
        query = query.where(EntryLog.branch == branch)
    if entry_type:
        query = query.where(EntryLog.type == entry_type)
    if date_from:
        query = query.where(EntryLog.timestamp >= _day_start(date_from))
    if date_to:
        query = query.where(EntryLog.timestamp < _day_start(date_to + timedelta(days=1)))

    return db.execute(query).scalars().all()


def students_inside(db: Session) -> List[EntryLog]:
    """Dernier passage de chaque étudiant dont ce passage est une entrée."""
    latest: Dict[str, EntryLog] = {}
    for log in db.execute(select(EntryLog).order_by(EntryLog.timestamp)).scalars():
        latest[normalize_id(log.student_id)] = log
    return [log for log in latest.values() if log.type == ENTRY]


def get_dashboard_stats(db: Session, today: Optional[date] = None) -> DashboardStats:
    today = today or datetime.now(timezone.utc).date()

    total_students = db.execute(select(func.count()).select_from(Student)).scalar() or 0
    entries_today = db.execute(
        select(func.count())
        .select_from(EntryLog)
        .where(EntryLog.type == ENTRY, EntryLog.timestamp >= _day_start(today))
    ).scalar() or 0

    return DashboardStats(
        total_students=total_students,
        entries_today=entries_today,
        currently_inside=len(students_inside(db)),
    )
