"""
Tests d'intégration du service de scan sur une base SQLite en mémoire.
Couverture : saisie manuelle, alternance, délai minimum, étudiant inconnu,
comparaison photo, traitement d'image caméra, garde à une place.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from librarytrack.exceptions import DuplicateFrame, IdentityNotFound, NoCardDetected, RateLimited, ScanBusy
from librarytrack.models.entry_log import ENTRY, EXIT, EntryLog
from librarytrack.models.student import Student
from librarytrack.schemas.scan import CardDetection
from librarytrack.schemas.student import ExtractedIdData
from librarytrack.services import admin_service
from librarytrack.services.capture_pipeline import CapturePipeline
from librarytrack.services.scan_service import ScanGuard, process_frame, process_student_id

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
CARD_IMAGE = "data:image/jpeg;base64," + "A" * 3000


@pytest.fixture
def student(db_session):
    s = Student(
        id="ID123",
        name="Asha Patil",
        branch="Computer",
        enroll_no="EN01",
        year_of_study="SY",
        id_card_image=CARD_IMAGE,
    )
    db_session.add(s)
    db_session.commit()
    return s


def make_client(id_number="id123", is_card=True):
    client = MagicMock()
    client.detect_id_card.return_value = CardDetection(is_id_card=is_card)
    client.extract_scan_id.return_value = ExtractedIdData(id_number=id_number)
    return client


# ============================================================
# Saisie manuelle
# ============================================================

def test_premier_passage_entry(db_session, student):
    result = process_student_id(db_session, " id123 ", now=T0, guard=ScanGuard())

    assert result.log.type == ENTRY
    assert result.log.student_id == "ID123"
    assert result.student.name == "Asha Patil"
    assert result.verdict == "inconclusive"
    assert result.image_match is None
    assert "Entrée" in result.message
    assert db_session.query(EntryLog).count() == 1


def test_alternance_entry_exit_entry(db_session, student):
    guard = ScanGuard()
    types = [
        process_student_id(db_session, "ID123", now=T0 + timedelta(minutes=i), guard=guard).log.type
        for i in range(3)
    ]
    assert types == [ENTRY, EXIT, ENTRY]


def test_delai_minimum_aucune_ecriture(db_session, student):
    process_student_id(db_session, "ID123", now=T0, guard=ScanGuard())

    with pytest.raises(RateLimited) as exc_info:
        process_student_id(db_session, "ID123", now=T0 + timedelta(seconds=4), guard=ScanGuard())

    assert exc_info.value.wait_remaining == pytest.approx(6)
    assert db_session.query(EntryLog).count() == 1


def test_delai_configure_en_base(db_session, student):
    admin_service.set_setting(db_session, admin_service.SETTING_MIN_INTERVAL, "60")
    process_student_id(db_session, "ID123", now=T0, guard=ScanGuard())

    with pytest.raises(RateLimited):
        process_student_id(db_session, "ID123", now=T0 + timedelta(seconds=30), guard=ScanGuard())


def test_etudiant_inconnu(db_session, student):
    with pytest.raises(IdentityNotFound):
        process_student_id(db_session, "nonexistent-id", now=T0, guard=ScanGuard())
    assert db_session.query(EntryLog).count() == 0


def test_garde_occupee_scan_busy(db_session, student):
    guard = ScanGuard()
    with guard.hold():
        assert guard.busy is True
        with pytest.raises(ScanBusy):
            process_student_id(db_session, "ID123", now=T0, guard=guard)
    assert guard.busy is False


def test_garde_liberee_apres_erreur(db_session, student):
    guard = ScanGuard()
    with pytest.raises(IdentityNotFound):
        process_student_id(db_session, "inconnu", now=T0, guard=guard)

    assert process_student_id(db_session, "ID123", now=T0, guard=guard).log.type == ENTRY


# ============================================================
# Image caméra
# ============================================================

def test_image_camera_photo_identique(db_session, student):
    pipeline = CapturePipeline()

    result = process_frame(db_session, CARD_IMAGE, make_client(), pipeline=pipeline, now=T0, guard=ScanGuard())

    assert result.log.type == ENTRY
    assert result.log.source == "scan"
    assert result.verdict == "match"
    assert result.image_match is True


def test_image_camera_photo_differente(db_session, student):
    frame = "data:image/jpeg;base64," + "B" * 3000

    result = process_frame(db_session, frame, make_client(), pipeline=CapturePipeline(), now=T0, guard=ScanGuard())

    assert result.verdict == "mismatch"
    assert result.image_match is False
    assert db_session.query(EntryLog).count() == 1  # l'indication ne bloque jamais


def test_image_camera_sans_photo_enregistree(db_session):
    db_session.add(Student(id="STAFF9", name="Meera Joshi", branch="Staff"))
    db_session.commit()

    result = process_frame(
        db_session, CARD_IMAGE, make_client(id_number="staff9"),
        pipeline=CapturePipeline(), now=T0, guard=ScanGuard(),
    )

    assert result.verdict == "inconclusive"
    assert result.image_match is None


def test_image_marquee_traitee_meme_en_cas_d_erreur(db_session, student):
    """Numéro lu mais étudiant inconnu : la même carte n'est pas retraitée ensuite."""
    pipeline = CapturePipeline()
    client = make_client(id_number="unknown-42")

    with pytest.raises(IdentityNotFound):
        process_frame(db_session, CARD_IMAGE, client, pipeline=pipeline, now=T0, guard=ScanGuard())

    client.detect_id_card.reset_mock()
    with pytest.raises(DuplicateFrame):
        process_frame(db_session, CARD_IMAGE, client, pipeline=pipeline, now=T0, guard=ScanGuard())
    client.detect_id_card.assert_not_called()


def test_image_sans_carte(db_session, student):
    with pytest.raises(NoCardDetected):
        process_frame(
            db_session, CARD_IMAGE, make_client(is_card=False),
            pipeline=CapturePipeline(), now=T0, guard=ScanGuard(),
        )
    assert db_session.query(EntryLog).count() == 0
