"""
Décision Entrée/Sortie pour un passage au portique.

Fonction pure : elle construit l'enregistrement sans le persister
(voir log_writer.append). États déduits du dernier passage :
- aucun historique  → Entry
- dernier = Entry   → Exit  (sauf délai minimum non écoulé)
- dernier = Exit    → Entry (sauf délai minimum non écoulé)
"""

import uuid
from datetime import datetime
from typing import Optional

from librarytrack.exceptions import RateLimited
from librarytrack.models.entry_log import ENTRY, EXIT, EntryLog
from librarytrack.services.image_similarity import MatchVerdict, verdict_to_flag
from librarytrack.services.log_history import as_utc


def next_type(last_event: Optional[EntryLog]) -> str:
    if last_event is None:
        return ENTRY
    return EXIT if last_event.type == ENTRY else ENTRY


def classify(
    student,
    now: datetime,
    last_event: Optional[EntryLog],
    min_interval_seconds: float,
    verdict: MatchVerdict = MatchVerdict.INCONCLUSIVE,
    source: Optional[str] = None,
) -> EntryLog:
    """
    Construit le prochain passage de l'étudiant.

    Lève RateLimited(wait_remaining) si le dernier passage date de moins de
    min_interval_seconds ; aucun enregistrement n'est alors construit.
    Nom et filière sont copiés depuis l'étudiant actuel, pas depuis l'historique.
    """
    now = as_utc(now)

    if last_event is not None:
        elapsed = (now - as_utc(last_event.timestamp)).total_seconds()
        if elapsed < min_interval_seconds:
            raise RateLimited(min_interval_seconds - elapsed, student_name=student.name)

    return EntryLog(
        id=str(uuid.uuid4()),
        student_id=student.id,
        student_name=student.name,
        branch=student.branch,
        timestamp=now,
        type=next_type(last_event),
        image_match=verdict_to_flag(verdict),
        source=source,
    )
