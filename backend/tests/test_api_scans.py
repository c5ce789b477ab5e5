"""
Tests d'intégration API du poste de scan.
POST /api/v1/scans/manual: saisie manuelle
POST /api/v1/scans/frame : image caméra
GET  /api/v1/scans/status, POST /start, POST /stop
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from librarytrack.database import get_db
from librarytrack.exceptions import (
    ConcurrentScan,
    DuplicateFrame,
    IdentityNotFound,
    NoCardDetected,
    RateLimited,
    ScanBusy,
    StorageError,
)
from librarytrack.main import app
from librarytrack.models.student import Student
from librarytrack.schemas.entry_log import EntryLogResponse
from librarytrack.schemas.scan import CardDetection, ScanResult
from librarytrack.schemas.student import ExtractedIdData, StudentResponse
from librarytrack.services import scan_service
from librarytrack.services.gemini_client import get_gemini_client

CARD_IMAGE = "data:image/jpeg;base64," + "Q" * 2000


def make_result(type_="Entry") -> ScanResult:
    now = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
    return ScanResult(
        log=EntryLogResponse(
            id="0b0c6f5e-1f7e-4b43-9c55-6e1d1c3f7a10",
            student_id="ID123",
            student_name="Asha Patil",
            branch="Computer",
            timestamp=now,
            type=type_,
            image_match=None,
            source="manual",
        ),
        student=StudentResponse(
            id="ID123", name="Asha Patil", branch="Computer",
            enroll_no="EN01", year_of_study="SY", has_id_card_image=False, created_at=now,
        ),
        image_match=None,
        verdict="inconclusive",
        message="Entrée enregistrée pour Asha Patil (ID123).",
    )


@pytest.fixture
def real_db(client, db_session):
    """Remplace la BDD mockée par une vraie session SQLite en mémoire."""
    app.dependency_overrides[get_db] = lambda: db_session
    db_session.add(Student(
        id="ID123", name="Asha Patil", branch="Computer",
        enroll_no="EN01", year_of_study="SY", id_card_image=CARD_IMAGE,
    ))
    db_session.commit()
    return db_session


# ============================================================
# POST /api/v1/scans/manual
# ============================================================

def test_manual_succes(client):
    with patch("librarytrack.routers.scans.scan_service.process_student_id") as mock_process:
        mock_process.return_value = make_result()
        response = client.post("/api/v1/scans/manual", json={"student_id": " id123 "})

    assert response.status_code == 201
    data = response.json()
    assert data["log"]["type"] == "Entry"
    assert data["message"].startswith("Entrée")
    assert mock_process.call_args.args[1] == " id123 "
    assert mock_process.call_args.kwargs["source"] == "manual"


def test_manual_identifiant_vide(client):
    response = client.post("/api/v1/scans/manual", json={"student_id": "   "})
    assert response.status_code == 422


def test_manual_delai_non_ecoule(client):
    with patch("librarytrack.routers.scans.scan_service.process_student_id") as mock_process:
        mock_process.side_effect = RateLimited(4.2, student_name="Asha Patil")
        response = client.post("/api/v1/scans/manual", json={"student_id": "ID123"})

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "5"
    data = response.json()
    assert data["error"] == "RateLimited"
    assert data["wait_remaining"] == pytest.approx(4.2)
    assert "5 s" in data["detail"]


@pytest.mark.parametrize("error,status,name", [
    (IdentityNotFound("nonexistent-id"), 404, "IdentityNotFound"),
    (ScanBusy(), 409, "ScanBusy"),
    (ConcurrentScan("id123"), 409, "ConcurrentScan"),
    (StorageError(), 503, "StorageError"),
])
def test_manual_erreurs_metier(client, error, status, name):
    with patch("librarytrack.routers.scans.scan_service.process_student_id") as mock_process:
        mock_process.side_effect = error
        response = client.post("/api/v1/scans/manual", json={"student_id": "x"})

    assert response.status_code == status
    assert response.json()["error"] == name


def test_manual_etudiant_inconnu_payload(client):
    with patch("librarytrack.routers.scans.scan_service.process_student_id") as mock_process:
        mock_process.side_effect = IdentityNotFound("nonexistent-id")
        response = client.post("/api/v1/scans/manual", json={"student_id": "NONEXISTENT-ID"})

    data = response.json()
    assert data["student_id"] == "nonexistent-id"
    assert "NONEXISTENT-ID" in data["detail"]


def test_manual_flux_complet(client, real_db):
    """Entrée puis délai non écoulé sur une vraie base."""
    first = client.post("/api/v1/scans/manual", json={"student_id": "id123"})
    second = client.post("/api/v1/scans/manual", json={"student_id": "ID123"})

    assert first.status_code == 201
    assert first.json()["log"]["type"] == "Entry"
    assert first.json()["log"]["student_name"] == "Asha Patil"
    assert second.status_code == 429
    assert second.json()["wait_remaining"] > 0


# ============================================================
# POST /api/v1/scans/frame
# ============================================================

def test_frame_flux_complet(client, real_db):
    gemini = MagicMock()
    gemini.detect_id_card.return_value = CardDetection(is_id_card=True)
    gemini.extract_scan_id.return_value = ExtractedIdData(id_number="ID123")
    app.dependency_overrides[get_gemini_client] = lambda: gemini

    with patch.object(scan_service, "capture_pipeline", scan_service.CapturePipeline()):
        response = client.post("/api/v1/scans/frame", json={"image": CARD_IMAGE})

    assert response.status_code == 201
    data = response.json()
    assert data["log"]["source"] == "scan"
    assert data["verdict"] == "match"
    assert data["image_match"] is True


@pytest.mark.parametrize("error,status", [
    (NoCardDetected(), 422),
    (DuplicateFrame(), 409),
])
def test_frame_erreurs(client, error, status):
    app.dependency_overrides[get_gemini_client] = lambda: MagicMock()
    with patch("librarytrack.routers.scans.scan_service.process_frame") as mock_process:
        mock_process.side_effect = error
        response = client.post("/api/v1/scans/frame", json={"image": CARD_IMAGE})

    assert response.status_code == status
    assert response.json()["error"] == type(error).__name__


def test_frame_image_vide(client):
    app.dependency_overrides[get_gemini_client] = lambda: MagicMock()
    response = client.post("/api/v1/scans/frame", json={"image": ""})
    assert response.status_code == 422


# ============================================================
# Marche / arrêt
# ============================================================

def test_stop_puis_start(client):
    pipeline = scan_service.CapturePipeline()
    with patch.object(scan_service, "capture_pipeline", pipeline):
        stopped = client.post("/api/v1/scans/stop")
        status = client.get("/api/v1/scans/status")
        started = client.post("/api/v1/scans/start")

    assert stopped.json() == {"scanning": False, "busy": False}
    assert status.json()["scanning"] is False
    assert started.json()["scanning"] is True


def test_frame_scan_arrete(client, real_db):
    app.dependency_overrides[get_gemini_client] = lambda: MagicMock()
    pipeline = scan_service.CapturePipeline()
    pipeline.stop()

    with patch.object(scan_service, "capture_pipeline", pipeline):
        response = client.post("/api/v1/scans/frame", json={"image": CARD_IMAGE})

    assert response.status_code == 409
    assert response.json()["error"] == "ScanningStopped"
