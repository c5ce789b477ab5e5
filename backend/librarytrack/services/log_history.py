"""
Lecture de l'historique des passages d'un étudiant.
"""

from datetime import datetime, timezone
from typing import Optional

from librarytrack.models.entry_log import EntryLog
from librarytrack.services.identity_resolver import normalize_id


def as_utc(value: datetime) -> datetime:
    """SQLite renvoie des datetime naïfs : on les considère en UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def last_event_for(store, student_id: str) -> Optional[EntryLog]:
    """
    Retourne le passage le plus récent (par timestamp) de l'étudiant, ou None.

    L'ordre renvoyé par le stockage n'est pas garanti : on filtre puis on trie ici.
    """
    wanted = normalize_id(student_id)
    matches = [log for log in store.logs_for(wanted) if normalize_id(log.student_id) == wanted]
    if not matches:
        return None
    return max(matches, key=lambda log: as_utc(log.timestamp))
