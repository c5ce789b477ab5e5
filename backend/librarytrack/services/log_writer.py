"""
Écriture append-only du journal des passages.

L'écrivain ne vérifie pas l'alternance Entry/Exit (déjà décidée par
classification.classify). Avec expected_last_id, il vérifie en revanche que
le dernier passage connu n'a pas changé depuis la décision, sous le verrou
de l'étudiant : deux postes ne peuvent pas écrire deux Entry de suite.
"""

import logging

from librarytrack.exceptions import ConcurrentScan
from librarytrack.models.entry_log import EntryLog
from librarytrack.services.log_history import last_event_for

logger = logging.getLogger(__name__)

UNCHECKED = object()


def append(store, log: EntryLog, expected_last_id=UNCHECKED) -> None:
    """
    Ajoute le passage au journal.

    expected_last_id : id du passage sur lequel la classification s'est basée
    (None = aucun historique). Si le dernier passage a changé entre-temps,
    lève ConcurrentScan sans rien écrire. Les erreurs de stockage remontent
    en StorageError, sans nouvel essai.
    """
    with store.student_lock(log.student_id):
        if expected_last_id is not UNCHECKED:
            current = last_event_for(store, log.student_id)
            current_id = current.id if current is not None else None
            if current_id != expected_last_id:
                logger.warning(
                    "Passage concurrent pour %s : attendu %s, trouvé %s",
                    log.student_id, expected_last_id, current_id,
                )
                raise ConcurrentScan(log.student_id)
        store.append(log)

    logger.info("Passage %s enregistré : %s (%s)", log.id, log.student_id, log.type)
