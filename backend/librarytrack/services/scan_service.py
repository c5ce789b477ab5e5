"""
Orchestration d'un passage au poste de scan.

identifiant (scanné ou saisi) → étudiant → comparaison de la photo (scan
uniquement) → dernier passage → classification Entry/Exit → écriture.

Un seul traitement à la fois (ScanGuard) : une requête qui arrive pendant un
traitement en cours reçoit ScanBusy au lieu de se chevaucher.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from librarytrack.exceptions import ScanBusy
from librarytrack.models.entry_log import ENTRY, EXIT, SOURCE_MANUAL, SOURCE_SCAN
from librarytrack.schemas.entry_log import EntryLogResponse
from librarytrack.schemas.scan import ScanResult
from librarytrack.services import admin_service, log_writer, student_service
from librarytrack.services.capture_pipeline import CapturePipeline
from librarytrack.services.classification import classify
from librarytrack.services.identity_resolver import resolve
from librarytrack.services.image_similarity import MatchVerdict, compare
from librarytrack.services.log_history import last_event_for
from librarytrack.services.stores import SqlLogStore, SqlStudentStore

logger = logging.getLogger(__name__)

TYPE_LABELS = {ENTRY: "Entrée", EXIT: "Sortie"}


class ScanGuard:
    """Garde à une place autour de capture → classification → écriture."""

    def __init__(self):
        self._slot = threading.Semaphore(1)
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @contextmanager
    def hold(self):
        if not self._slot.acquire(blocking=False):
            raise ScanBusy()
        self._busy = True
        try:
            yield
        finally:
            self._busy = False
            self._slot.release()


scan_guard = ScanGuard()
capture_pipeline = CapturePipeline()


def process_student_id(
    db: Session,
    raw_id: str,
    source: str = SOURCE_MANUAL,
    scanned_image: Optional[str] = None,
    now: Optional[datetime] = None,
    guard: Optional[ScanGuard] = None,
) -> ScanResult:
    """Enregistre le passage d'un identifiant saisi (ou déjà lu sur une carte)."""
    with (guard or scan_guard).hold():
        return _record_passage(db, raw_id, source, scanned_image, now)


def process_frame(
    db: Session,
    image: str,
    client,
    pipeline: Optional[CapturePipeline] = None,
    now: Optional[datetime] = None,
    guard: Optional[ScanGuard] = None,
) -> ScanResult:
    """
    Traite une image de la caméra du poste.

    Une fois un numéro lu, l'image devient « dernière carte traitée » quel que
    soit le résultat (étudiant inconnu, délai non écoulé...) : la même carte
    laissée devant la caméra n'est pas retraitée à chaque capture.
    """
    pipeline = pipeline or capture_pipeline
    with (guard or scan_guard).hold():
        capture = pipeline.capture_and_identify(image, client)
        try:
            return _record_passage(db, capture.id_candidate, SOURCE_SCAN, capture.image_payload, now)
        finally:
            pipeline.mark_processed(capture.image_payload)


def _record_passage(
    db: Session,
    raw_id: str,
    source: str,
    scanned_image: Optional[str],
    now: Optional[datetime],
) -> ScanResult:
    now = now or datetime.now(timezone.utc)
    logs = SqlLogStore(db)

    student = resolve(SqlStudentStore(db), raw_id)

    verdict = MatchVerdict.INCONCLUSIVE
    if source == SOURCE_SCAN:
        verdict = compare(student.id_card_image, scanned_image)
        logger.debug("Comparaison photo pour %s : %s", student.id, verdict.value)

    last_event = last_event_for(logs, student.id)
    log = classify(
        student,
        now,
        last_event,
        admin_service.get_min_interval(db),
        verdict=verdict,
        source=source,
    )
    log_writer.append(logs, log, expected_last_id=last_event.id if last_event else None)

    return ScanResult(
        log=EntryLogResponse.model_validate(log),
        student=student_service.to_response(student),
        image_match=log.image_match,
        verdict=verdict.value,
        message=f"{TYPE_LABELS.get(log.type, log.type)} enregistrée pour {student.name} ({student.id.upper()}).",
    )
