"""
Tests du référentiel des filières (SQLite en mémoire).
"""

import pytest

from librarytrack.config import settings
from librarytrack.models.student import Student
from librarytrack.schemas.branch import BranchCreate, BranchUpdate
from librarytrack.services import branch_service


def test_seed_une_seule_fois(db_session):
    branch_service.seed_default_branches(db_session)
    branch_service.seed_default_branches(db_session)

    names = [b.name for b in branch_service.get_branches(db_session)]
    assert names == list(settings.DEFAULT_BRANCHES)


def test_create_branch(db_session):
    branch = branch_service.create_branch(db_session, BranchCreate(name="Biotech"))

    assert branch.id is not None
    assert branch_service.find_branch(db_session, "BIOTECH").id == branch.id


@pytest.mark.parametrize("name", ["computer", "Staff"])
def test_create_branch_nom_pris(db_session, name):
    branch_service.create_branch(db_session, BranchCreate(name="Computer"))

    with pytest.raises(ValueError, match="existe déjà"):
        branch_service.create_branch(db_session, BranchCreate(name=name))


def test_rename_branch(db_session):
    branch = branch_service.create_branch(db_session, BranchCreate(name="Mecanical"))

    renamed = branch_service.rename_branch(db_session, branch.id, BranchUpdate(name="Mechanical"))

    assert renamed.name == "Mechanical"


def test_rename_branch_casse_seule(db_session):
    branch = branch_service.create_branch(db_session, BranchCreate(name="civil"))

    assert branch_service.rename_branch(db_session, branch.id, BranchUpdate(name="Civil")).name == "Civil"


def test_rename_branch_collision(db_session):
    branch_service.create_branch(db_session, BranchCreate(name="Civil"))
    other = branch_service.create_branch(db_session, BranchCreate(name="Electrical"))

    with pytest.raises(ValueError, match="porte déjà"):
        branch_service.rename_branch(db_session, other.id, BranchUpdate(name="CIVIL"))


def test_rename_branch_introuvable(db_session):
    assert branch_service.rename_branch(db_session, 999, BranchUpdate(name="X")) is None


def test_delete_branch_ne_touche_pas_les_etudiants(db_session):
    branch = branch_service.create_branch(db_session, BranchCreate(name="Civil"))
    db_session.add(Student(id="S1", name="Ravi Kumar", branch="Civil", enroll_no="E1", year_of_study="FY"))
    db_session.commit()

    assert branch_service.delete_branch(db_session, branch.id) is True
    assert branch_service.delete_branch(db_session, branch.id) is False
    assert db_session.get(Student, "S1").branch == "Civil"


@pytest.mark.parametrize("name", ["staff", "Staff"])
def test_rename_branch_staff_refuse(db_session, name):
    branch = branch_service.create_branch(db_session, BranchCreate(name="Civil"))

    with pytest.raises(ValueError):
        branch_service.rename_branch(db_session, branch.id, BranchUpdate(name=name))

    assert branch_service.find_branch(db_session, "Civil") is not None
    assert branch_service.find_branch(db_session, "staff") is None
