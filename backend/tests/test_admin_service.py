"""
Tests de la console d'administration : identifiants et paramètres.
"""

from librarytrack.config import settings
from librarytrack.models.admin import AdminCredential
from librarytrack.schemas.admin import CredentialsUpdate, SettingsUpdate
from librarytrack.services import admin_service


def test_identifiant_par_defaut(db_session):
    admin_service.ensure_admin_credentials(db_session)
    admin_service.ensure_admin_credentials(db_session)

    assert db_session.query(AdminCredential).count() == 1
    credential = db_session.query(AdminCredential).one()
    assert credential.password_hash != settings.DEFAULT_ADMIN_PASSWORD
    assert admin_service.verify_credentials(
        db_session, settings.DEFAULT_ADMIN_USERNAME, settings.DEFAULT_ADMIN_PASSWORD
    ) is True
    assert credential.last_login is not None


def test_mauvais_mot_de_passe(db_session):
    admin_service.ensure_admin_credentials(db_session)

    assert admin_service.verify_credentials(db_session, "admin", "wrong") is False
    assert admin_service.verify_credentials(db_session, "root", settings.DEFAULT_ADMIN_PASSWORD) is False


def test_sans_compte(db_session):
    assert admin_service.verify_credentials(db_session, "admin", "password") is False


def test_changement_identifiants(db_session):
    admin_service.ensure_admin_credentials(db_session)

    username = admin_service.update_credentials(
        db_session, CredentialsUpdate(username="librarian", password="s3cret!")
    )

    assert username == "librarian"
    assert admin_service.verify_credentials(db_session, "librarian", "s3cret!") is True
    assert admin_service.verify_credentials(db_session, "admin", "password") is False


def test_parametres_par_defaut(db_session, monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")

    result = admin_service.get_settings(db_session)

    assert result.min_scan_interval_seconds == settings.MIN_SCAN_INTERVAL_SECONDS
    assert result.gemini_api_key_configured is False
    assert result.gemini_api_key_hint is None


def test_mise_a_jour_parametres(db_session):
    result = admin_service.update_settings(
        db_session, SettingsUpdate(min_scan_interval_seconds=30, gemini_api_key="AIzaSyTest-7890")
    )

    assert result.min_scan_interval_seconds == 30
    assert result.gemini_api_key_configured is True
    assert result.gemini_api_key_hint == "…7890"
    assert admin_service.get_min_interval(db_session) == 30
    assert admin_service.get_api_key(db_session) == "AIzaSyTest-7890"


def test_delai_invalide_en_base(db_session):
    admin_service.set_setting(db_session, admin_service.SETTING_MIN_INTERVAL, "dix")

    assert admin_service.get_min_interval(db_session) == settings.MIN_SCAN_INTERVAL_SECONDS
