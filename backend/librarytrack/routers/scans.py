"""
Router du poste de scan.
Saisie manuelle d'un identifiant, traitement d'une image caméra,
marche/arrêt du scan automatique.

Les erreurs métier (étudiant inconnu, délai non écoulé, carte illisible...)
sont traduites en réponse JSON par le handler de main.py.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from librarytrack.database import get_db
from librarytrack.models.entry_log import SOURCE_MANUAL
from librarytrack.schemas.scan import FrameScanRequest, ManualScanRequest, ScannerStatus, ScanResult
from librarytrack.services import scan_service
from librarytrack.services.gemini_client import GeminiClient, get_gemini_client

router = APIRouter(prefix="/api/v1/scans", tags=["Poste de scan"])


@router.post("/manual", response_model=ScanResult, status_code=201, summary="Passage par saisie manuelle")
def scan_manual(data: ManualScanRequest, db: Session = Depends(get_db)):
    """
    Enregistre une entrée ou une sortie pour l'identifiant saisi.

    - 404 : étudiant non enregistré
    - 429 : délai minimum non écoulé (wait_remaining + en-tête Retry-After)
    - 409 : un autre scan est en cours
    """
    return scan_service.process_student_id(db, data.student_id, source=SOURCE_MANUAL)


@router.post("/frame", response_model=ScanResult, status_code=201, summary="Passage par image caméra")
def scan_frame(
    data: FrameScanRequest,
    db: Session = Depends(get_db),
    client: GeminiClient = Depends(get_gemini_client),
):
    """
    Détecte la carte sur l'image, lit le numéro étudiant puis enregistre le passage.
    La photo est comparée à la carte enregistrée (indication seulement).

    - 422 : pas de carte détectée, ou numéro illisible
    - 409 : même carte que la précédente, scan arrêté ou scan déjà en cours
    """
    return scan_service.process_frame(db, data.image, client)


@router.get("/status", response_model=ScannerStatus, summary="État du scan automatique")
def scanner_status():
    return ScannerStatus(
        scanning=scan_service.capture_pipeline.scanning,
        busy=scan_service.scan_guard.busy,
    )


@router.post("/start", response_model=ScannerStatus, summary="Démarrer le scan automatique")
def start_scanning():
    scan_service.capture_pipeline.start()
    return scanner_status()


@router.post("/stop", response_model=ScannerStatus, summary="Arrêter le scan automatique")
def stop_scanning():
    """Refuse les prochaines images ; un passage en cours de traitement va à son terme."""
    scan_service.capture_pipeline.stop()
    return scanner_status()
