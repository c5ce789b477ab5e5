"""
Accès aux collections Student et EntryLog derrière une interface commune.

Le moteur de classification ne connaît que ces méthodes :
- étudiants : list_students, find_by_id, upsert, delete
- journal   : list_logs, logs_for, append, student_lock

SqlStudentStore / SqlLogStore s'appuient sur une session SQLAlchemy ;
les variantes InMemory* servent aux tests et aux outils hors base.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from librarytrack.exceptions import StorageError
from librarytrack.models.entry_log import EntryLog
from librarytrack.models.student import Student
from librarytrack.services.identity_resolver import normalize_id

logger = logging.getLogger(__name__)


class _StudentLocks:
    """
    Un verrou par étudiant, partagé par tout le processus.
    Sérialise lecture du dernier passage + insertion pour un même étudiant
    (plusieurs postes servis par la même API).
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    @contextmanager
    def hold(self, student_id: str):
        key = normalize_id(student_id)
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield


_student_locks = _StudentLocks()


class SqlStudentStore:
    def __init__(self, db: Session):
        self.db = db

    def list_students(self) -> List[Student]:
        return list(self.db.execute(select(Student).order_by(Student.name)).scalars().all())

    def find_by_id(self, student_id: str) -> Optional[Student]:
        return self.db.execute(
            select(Student).where(func.lower(Student.id) == normalize_id(student_id))
        ).scalar()

    def upsert(self, student: Student) -> None:
        self.db.merge(student)
        self.db.commit()

    def delete(self, student_id: str) -> None:
        student = self.find_by_id(student_id)
        if student is not None:
            self.db.delete(student)
            self.db.commit()


class SqlLogStore:
    def __init__(self, db: Session):
        self.db = db

    def list_logs(self) -> List[EntryLog]:
        return list(self.db.execute(select(EntryLog)).scalars().all())

    def logs_for(self, student_id: str) -> List[EntryLog]:
        return list(self.db.execute(
            select(EntryLog).where(func.lower(EntryLog.student_id) == normalize_id(student_id))
        ).scalars().all())

    def append(self, log: EntryLog) -> None:
        """Insère le passage. Lève StorageError si la base refuse l'écriture."""
        self.db.add(log)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Écriture du passage %s impossible : %s", log.id, exc)
            raise StorageError() from exc

    def student_lock(self, student_id: str):
        return _student_locks.hold(student_id)


class InMemoryStudentStore:
    def __init__(self, students=None):
        self._students: Dict[str, Student] = {}
        for student in students or []:
            self.upsert(student)

    def list_students(self) -> List[Student]:
        return list(self._students.values())

    def find_by_id(self, student_id: str) -> Optional[Student]:
        return self._students.get(normalize_id(student_id))

    def upsert(self, student: Student) -> None:
        self._students[normalize_id(student.id)] = student

    def delete(self, student_id: str) -> None:
        self._students.pop(normalize_id(student_id), None)


class InMemoryLogStore:
    def __init__(self, logs=None):
        self._logs: List[EntryLog] = list(logs or [])
        self._locks = _StudentLocks()

    def list_logs(self) -> List[EntryLog]:
        return list(self._logs)

    def logs_for(self, student_id: str) -> List[EntryLog]:
        wanted = normalize_id(student_id)
        return [log for log in self._logs if normalize_id(log.student_id) == wanted]

    def append(self, log: EntryLog) -> None:
        self._logs.append(log)

    def student_lock(self, student_id: str):
        return self._locks.hold(student_id)
