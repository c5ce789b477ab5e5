"""
Pipeline de capture du poste de scan : image caméra → identifiant candidat.

Étapes : arrêt manuel ? → pause après image sans carte ? → même carte que la
précédente ? → détection IA → extraction IA du numéro.
La détection passe avant l'extraction pour ne pas payer une extraction sur
une image de mur ou de bureau.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from librarytrack.config import settings
from librarytrack.exceptions import DuplicateFrame, ExtractionFailed, NoCardDetected, ScanningStopped
from librarytrack.services.image_similarity import MatchVerdict, compare

logger = logging.getLogger(__name__)


@dataclass
class CaptureResult:
    id_candidate: str
    image_payload: str


class CapturePipeline:
    def __init__(
        self,
        cooldown_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cooldown_seconds = (
            settings.DETECTION_COOLDOWN_SECONDS if cooldown_seconds is None else cooldown_seconds
        )
        self._clock = clock
        self._lock = threading.Lock()
        self._cooldown_until = 0.0
        self._last_processed: Optional[str] = None
        self._stopped = False

    @property
    def scanning(self) -> bool:
        return not self._stopped

    def start(self) -> None:
        with self._lock:
            self._stopped = False
            self._cooldown_until = 0.0
        logger.info("Scan automatique démarré.")

    def stop(self) -> None:
        """Refuse les prochaines images ; un traitement déjà lancé va à son terme."""
        with self._lock:
            self._stopped = True
            self._last_processed = None
        logger.info("Scan automatique arrêté.")

    def mark_processed(self, image: str) -> None:
        """Sans effet après stop() : l'arrêt efface la dernière carte traitée."""
        with self._lock:
            if self._stopped:
                return
            self._last_processed = image

    def capture_and_identify(self, image: str, client) -> CaptureResult:
        """
        Retourne l'identifiant lu sur la carte (minuscules, sans espaces).

        Lève ScanningStopped, NoCardDetected (image sans carte ou pause en cours),
        DuplicateFrame (même carte que la précédente) ou ExtractionFailed.
        """
        with self._lock:
            if self._stopped:
                raise ScanningStopped()
            if self._clock() < self._cooldown_until:
                raise NoCardDetected()
            last_processed = self._last_processed

        if last_processed and compare(image, last_processed) == MatchVerdict.MATCH:
            logger.debug("Image identique à la dernière carte traitée, ignorée.")
            raise DuplicateFrame()

        detection = client.detect_id_card(image)
        if not detection.is_id_card:
            with self._lock:
                self._cooldown_until = self._clock() + self.cooldown_seconds
            logger.debug("Pas de carte détectée, pause de %.1f s.", self.cooldown_seconds)
            raise NoCardDetected()

        extracted = client.extract_scan_id(image)
        if not extracted.id_number:
            raise ExtractionFailed("Carte détectée mais numéro étudiant illisible.")

        return CaptureResult(
            id_candidate=extracted.id_number.strip().lower(),
            image_payload=image,
        )
