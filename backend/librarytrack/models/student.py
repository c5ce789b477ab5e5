"""
Modèle SQLAlchemy pour la table students.
L'identifiant est le numéro imprimé sous le code-barres de la carte étudiant :
unique sans tenir compte de la casse (index sur lower(id)).
"""

from sqlalchemy import Column, DateTime, Index, String, Text, func

from librarytrack.database import Base

STAFF_BRANCH = "Staff"
YEARS_OF_STUDY = ("FY", "SY", "TY")


class Student(Base):
    __tablename__ = "students"

    id = Column(String(100), primary_key=True)
    name = Column(String(200), nullable=False)
    branch = Column(String(100), nullable=False)
    enroll_no = Column(String(100), nullable=True)      # Obligatoire sauf pour "Staff"
    year_of_study = Column(String(2), nullable=True)    # FY, SY, TY ; obligatoire sauf pour "Staff"
    id_card_image = Column(Text, nullable=True)         # Photo de référence (data URI)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


Index("ux_students_id_lower", func.lower(Student.id), unique=True)
